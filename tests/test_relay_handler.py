#!/usr/bin/env python3
"""
End-to-end tests for the relay entry point.

The SQS client is replaced with a MagicMock; everything else (config,
authentication, marshalling, routing, dispatch) is real.

Run with: pytest tests/test_relay_handler.py -v
"""
import os
import sys
import json
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set required environment variables BEFORE imports
os.environ.setdefault("AUTH", "test-secret")
os.environ.setdefault("SQS_SUFFIX", "test")
os.environ.setdefault("PROVIDER", "sendgrid")
os.environ.setdefault("SQS_REGION", "us-east-1")

from src.app.relay_handler import relay_handler, relay_response, marshall_events
from src.runtime.config import load_config
from src.runtime.deps import Deps

SECRET = "test-secret"

UNAUTHORIZED = {"statusCode": 401, "body": "Unauthorized", "isBase64Encoded": False}
SERVER_ERROR = {"statusCode": 500, "body": "Internal Server Error", "isBase64Encoded": False}


def make_deps(provider="sendgrid"):
    config = load_config({
        "AUTH": SECRET,
        "SQS_SUFFIX": "test",
        "PROVIDER": provider,
        "SQS_REGION": "us-east-1",
    })
    deps = Deps(config=config)
    deps.sqs = MagicMock()
    deps.sqs.get_queue_url.side_effect = lambda QueueName: {"QueueUrl": f"https://sqs.test/{QueueName}"}
    deps.sqs.send_message.return_value = {"MessageId": "msg-1"}
    return deps


def sendgrid_event(event_type, email="user@example.com"):
    return {
        "email": email,
        "timestamp": 1514764800,
        "event": event_type,
        "sg_event_id": f"evt-{event_type}",
        "sg_message_id": "abc123.filter0001",
    }


def gateway_event(payload, auth=SECRET, **extra):
    event = {"body": json.dumps(payload), **extra}
    if auth is not None:
        event["queryStringParameters"] = {"auth": auth}
    return event


def pushed_queues(deps):
    return sorted(call.kwargs["QueueUrl"].rsplit("/", 1)[-1] for call in deps.sqs.send_message.call_args_list)


# =============================================================================
# TEST: Authentication gate
# =============================================================================

class TestGatewayAuth:
    """Tests for authentication of gateway requests."""

    def test_wrong_auth(self):
        """Test wrong credential is rejected with no push."""
        deps = make_deps()
        result = relay_handler(gateway_event([sendgrid_event("bounce")], auth="wrong"), None, deps)

        assert result == UNAUTHORIZED
        deps.sqs.send_message.assert_not_called()
        print("✓ Wrong auth returns 401")

    def test_missing_query_parameters(self):
        """Test gateway request without query parameters is rejected."""
        deps = make_deps()
        result = relay_handler(gateway_event([sendgrid_event("bounce")], auth=None), None, deps)

        assert result == UNAUTHORIZED
        deps.sqs.send_message.assert_not_called()

    def test_query_parameters_without_auth(self):
        """Test query parameters lacking auth are rejected."""
        deps = make_deps()
        event = {"body": "[]", "queryStringParameters": {"other": "x"}}

        assert relay_handler(event, None, deps) == UNAUTHORIZED

    def test_body_not_parsed_before_auth(self):
        """Test an unauthenticated request never touches the body."""
        deps = make_deps()
        event = {"body": "not json at all", "queryStringParameters": {"auth": "wrong"}}

        with patch("src.app.relay_handler.extract_raw_events") as extract:
            result = relay_handler(event, None, deps)

        assert result == UNAUTHORIZED
        extract.assert_not_called()

    def test_direct_invoke_needs_no_auth(self):
        """Test direct invokes skip authentication."""
        deps = make_deps()
        result = relay_handler(sendgrid_event("delivered"), None, deps)

        assert result["statusCode"] == 200


# =============================================================================
# TEST: Processing
# =============================================================================

class TestProcessing:
    """Tests for marshalling and dispatch through the entry point."""

    def test_three_valid_events(self):
        """Test a gateway batch of three events is fully dispatched."""
        deps = make_deps()
        payload = [sendgrid_event("bounce"), sendgrid_event("spamreport"), sendgrid_event("delivered")]

        result = relay_handler(gateway_event(payload), None, deps)

        assert result == {"statusCode": 200, "body": "Processed 3 events", "isBase64Encoded": False}
        assert pushed_queues(deps) == [
            "fxa-email-bounce-test",
            "fxa-email-complaint-test",
            "fxa-email-delivery-test",
        ]
        print("✓ Processed 3 events")

    def test_unrecognized_event_dropped(self):
        """Test unrecognized event types are dropped, not counted."""
        deps = make_deps()
        payload = [sendgrid_event("bounce"), sendgrid_event("open"), sendgrid_event("delivered")]

        result = relay_handler(gateway_event(payload), None, deps)

        assert result["statusCode"] == 200
        assert result["body"] == "Processed 2 events"
        assert deps.sqs.send_message.call_count == 2
        print("✓ Unrecognized events dropped")

    def test_all_events_dropped(self):
        """Test an empty normalized batch is a success with zero events."""
        deps = make_deps()
        result = relay_handler(gateway_event([sendgrid_event("open"), {"junk": True}]), None, deps)

        assert result == {"statusCode": 200, "body": "Processed 0 events", "isBase64Encoded": False}
        deps.sqs.send_message.assert_not_called()

    def test_empty_array(self):
        deps = make_deps()
        assert relay_handler([], None, deps)["body"] == "Processed 0 events"

    def test_single_object_equals_single_element_array(self):
        """Test a direct object and a one-element array behave identically."""
        raw = sendgrid_event("bounce")

        deps_object = make_deps()
        deps_array = make_deps()
        result_object = relay_handler(dict(raw), None, deps_object)
        result_array = relay_handler([dict(raw)], None, deps_array)

        assert result_object == result_array == {
            "statusCode": 200, "body": "Processed 1 events", "isBase64Encoded": False,
        }
        assert deps_object.sqs.send_message.call_args_list == deps_array.sqs.send_message.call_args_list

    def test_gateway_single_object_body(self):
        deps = make_deps()
        result = relay_handler(gateway_event(sendgrid_event("delivered")), None, deps)

        assert result["body"] == "Processed 1 events"

    def test_pushed_payload_is_canonical(self):
        """Test the queue receives the SES-shaped event."""
        deps = make_deps()
        relay_handler([sendgrid_event("bounce")], None, deps)

        body = json.loads(deps.sqs.send_message.call_args.kwargs["MessageBody"])
        assert body["notificationType"] == "Bounce"
        assert body["mail"]["messageId"] == "abc123"
        assert body["bounce"]["bouncedRecipients"][0]["emailAddress"] == "user@example.com"

    def test_socketlabs_provider(self):
        """Test the configured provider decides the vocabulary."""
        deps = make_deps(provider="socketlabs")
        payload = [
            {"Type": "Failed", "Address": "a@example.com", "DateTime": "2018-05-16T10:44:23Z"},
            {"Type": "Delivered", "Address": "b@example.com", "DateTime": "2018-05-16T10:44:23Z"},
            {"Type": "Tracking", "Address": "c@example.com"},
            sendgrid_event("bounce"),
        ]

        result = relay_handler(gateway_event(payload), None, deps)

        assert result["body"] == "Processed 2 events"
        assert pushed_queues(deps) == ["fxa-email-bounce-test", "fxa-email-delivery-test"]

    def test_out_of_range_datetime_does_not_fail_batch(self):
        """Test one overflowing DateTime falls back to now instead of a 500."""
        deps = make_deps(provider="socketlabs")
        payload = [
            {"Type": "Failed", "Address": "a@example.com", "DateTime": "2018-05-16T10:44:23Z"},
            {"Type": "Delivered", "Address": "b@example.com", "DateTime": "9999-12-31T23:59:59-01:00"},
        ]

        result = relay_handler(gateway_event(payload), None, deps)

        assert result == {"statusCode": 200, "body": "Processed 2 events", "isBase64Encoded": False}
        assert pushed_queues(deps) == ["fxa-email-bounce-test", "fxa-email-delivery-test"]
        print("✓ Out-of-range DateTime tolerated")

    def test_marshall_events_keeps_order(self):
        deps = make_deps()
        events = marshall_events(
            [sendgrid_event("delivered"), sendgrid_event("click"), sendgrid_event("bounce")],
            deps.marshaller,
        )

        assert [e.notification_type.value for e in events] == ["Delivery", "Bounce"]


# =============================================================================
# TEST: Failures
# =============================================================================

class TestFailures:
    """Tests for all-or-nothing failure reporting."""

    def test_one_push_fails(self):
        """Test a single failed push fails the whole invocation."""
        deps = make_deps()

        def send_message(QueueUrl, MessageBody):
            if "bounce" in QueueUrl:
                raise ClientError({"Error": {"Code": "ServiceUnavailable", "Message": "down"}}, "SendMessage")
            return {"MessageId": "ok"}

        deps.sqs.send_message.side_effect = send_message
        payload = [sendgrid_event("bounce"), sendgrid_event("delivered")]

        result = relay_handler(gateway_event(payload), None, deps)

        assert result == SERVER_ERROR
        assert deps.sqs.send_message.call_count == 2
        print("✓ Partial failure returns 500")

    def test_invalid_json_body(self):
        """Test an unparseable body returns 500."""
        deps = make_deps()
        event = {"body": "{not json", "queryStringParameters": {"auth": SECRET}}

        assert relay_handler(event, None, deps) == SERVER_ERROR
        deps.sqs.send_message.assert_not_called()

    def test_unexpected_fault(self):
        """Test any unexpected exception becomes a bare 500."""
        deps = make_deps()
        deps.dispatcher.dispatch_all = MagicMock(side_effect=RuntimeError("secret detail"))

        result = relay_handler([sendgrid_event("bounce")], None, deps)

        assert result == SERVER_ERROR
        assert "secret detail" not in result["body"]

    def test_queue_lookup_failure(self):
        """Test get_queue_url failures count as dispatch failures."""
        deps = make_deps()
        deps.sqs.get_queue_url.side_effect = ClientError(
            {"Error": {"Code": "AWS.SimpleQueueService.NonExistentQueue", "Message": "nope"}}, "GetQueueUrl"
        )

        assert relay_handler([sendgrid_event("delivered")], None, deps) == SERVER_ERROR

    def test_credential_never_logged(self, caplog):
        """Test neither the configured nor the candidate credential is logged."""
        import logging

        deps = make_deps()
        with caplog.at_level(logging.DEBUG):
            relay_handler(gateway_event([sendgrid_event("bounce")], auth="candidate-token"), None, deps)
            relay_handler(gateway_event([sendgrid_event("bounce")]), None, deps)

        assert "candidate-token" not in caplog.text
        assert SECRET not in caplog.text


# =============================================================================
# TEST: Lambda module
# =============================================================================

class TestLambdaModule:
    """Tests for app.py."""

    def test_relay_response(self):
        assert relay_response(401, "Unauthorized") == UNAUTHORIZED

    def test_main_uses_process_deps(self):
        """Test app.main delegates to the relay with the cold-start Deps."""
        import app

        with patch("app.relay_handler", return_value=UNAUTHORIZED) as handler:
            result = app.main({"body": "[]"}, "ctx")

        assert result == UNAUTHORIZED
        handler.assert_called_once_with({"body": "[]"}, "ctx", deps=app.DEPS)
        assert app.lambda_handler is app.main


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
