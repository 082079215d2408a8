"""
Tests for order event recording and Kafka publication.
"""

from datetime import timedelta
from io import StringIO
from unittest.mock import MagicMock, patch

import pytest
from confluent_kafka import KafkaError, KafkaException
from django.core.management import CommandError, call_command
from django.utils import timezone

from apps.core.exceptions import InvalidTransition
from apps.deliveries.services import AssignmentCoordinator
from apps.events.constants import KAFKA_TOPIC_SETTINGS, KAFKA_TOPICS, EventTypes
from apps.events.models import DeadLetterQueue, OrderEvent
from apps.events.services import (
    EventService,
    classify_transition,
    is_event_processed,
    mark_event_processed,
)
from apps.orders.constants import ActorRole, OrderStatus
from apps.orders.services import OrderLedger
from infrastructure.kafka_client import KafkaClient, dlq_backoff


@pytest.fixture
def mock_kafka():
    with patch("apps.events.services.kafka_client") as client:
        client.publish.return_value = True
        yield client


# ==============================================================================
# EVENT RECORDING TESTS
# ==============================================================================

@pytest.mark.django_db
class TestOrderEvents:
    """Tests for the per-transition event log."""

    def test_creation_records_placed_event(self, order):
        """Test a new order has an order_placed event."""
        event = order.events.get()

        assert event.event_type == EventTypes.ORDER_PLACED
        assert event.from_status == ""
        assert event.to_status == OrderStatus.PLACED
        assert event.actor_role == ActorRole.CUSTOMER
        assert event.event_data["order_number"] == order.order_number

    def test_one_event_per_transition(self, order_at):
        """Test the full path leaves one event per status change."""
        order = order_at(OrderStatus.DELIVERED)

        events = list(EventService.get_order_events(order.id))

        assert [event.to_status for event in events] == [
            OrderStatus.PLACED,
            OrderStatus.CONFIRMED,
            OrderStatus.PREPARING,
            OrderStatus.READY,
            OrderStatus.ASSIGNED,
            OrderStatus.ACCEPTED,
            OrderStatus.PICKED_UP,
            OrderStatus.OUT_FOR_DELIVERY,
            OrderStatus.DELIVERED,
        ]
        assert events[-1].event_type == EventTypes.ORDER_DELIVERED
        assert events[-1].partner_id == order.delivery_partner_id

    def test_assignment_event_carries_fee(self, ready_order, partner):
        """Test the assigned event records the fee split."""
        AssignmentCoordinator.assign(ready_order.id, partner.id)

        event = OrderEvent.objects.get(order=ready_order, event_type=EventTypes.PARTNER_ASSIGNED)

        assert event.partner_id == partner.id
        assert event.event_data["delivery_fee"] == "25.00"
        assert event.event_data["partner_earnings"] == "20.00"

    def test_rejection_event_keeps_partner_and_reason(self, ready_order, partner):
        """Test the rejected event names the partner who released the order."""
        AssignmentCoordinator.assign(ready_order.id, partner.id)
        AssignmentCoordinator.reject(ready_order.id, partner.id, "Too far")

        event = OrderEvent.objects.get(order=ready_order, event_type=EventTypes.PARTNER_REJECTED)

        assert event.from_status == OrderStatus.ASSIGNED
        assert event.to_status == OrderStatus.READY
        assert event.partner_id == partner.id
        assert event.event_data["reason"] == "Too far"

    def test_failed_transition_records_nothing(self, order):
        """Test a refused transition leaves no event."""
        with pytest.raises(InvalidTransition):
            OrderLedger.transition_status(order.id, OrderStatus.DELIVERED, ActorRole.SYSTEM)
        assert order.events.count() == 1

    @pytest.mark.parametrize(
        "previous, new, expected",
        [
            (None, OrderStatus.PLACED, EventTypes.ORDER_PLACED),
            (OrderStatus.PLACED, OrderStatus.CONFIRMED, EventTypes.ORDER_STATUS_CHANGED),
            (OrderStatus.READY, OrderStatus.ASSIGNED, EventTypes.PARTNER_ASSIGNED),
            (OrderStatus.ASSIGNED, OrderStatus.ACCEPTED, EventTypes.PARTNER_ACCEPTED),
            (OrderStatus.ACCEPTED, OrderStatus.READY, EventTypes.PARTNER_REJECTED),
            (OrderStatus.PREPARING, OrderStatus.READY, EventTypes.ORDER_STATUS_CHANGED),
            (OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED, EventTypes.ORDER_DELIVERED),
            (OrderStatus.PICKED_UP, OrderStatus.CANCELLED, EventTypes.ORDER_CANCELLED),
        ],
    )
    def test_classify_transition(self, previous, new, expected):
        """Test event types derived from status pairs."""
        assert classify_transition(previous, new) == expected


# ==============================================================================
# PUBLICATION TESTS
# ==============================================================================

@pytest.mark.django_db
class TestPublish:
    """Tests for publishing events after commit."""

    def test_no_publish_when_disabled(self, settings, mock_kafka, order):
        """Test nothing reaches Kafka while it is switched off."""
        settings.KAFKA_ENABLED = False
        OrderLedger.transition_status(order.id, OrderStatus.CONFIRMED, ActorRole.VENDOR)
        mock_kafka.publish.assert_not_called()

    def test_publish_on_commit(self, settings, mock_kafka, order, django_capture_on_commit_callbacks):
        """Test the status change is published once the transaction commits."""
        settings.KAFKA_ENABLED = True

        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            OrderLedger.transition_status(order.id, OrderStatus.CONFIRMED, ActorRole.VENDOR)

        assert len(callbacks) == 1
        mock_kafka.publish.assert_called_once()
        kwargs = mock_kafka.publish.call_args.kwargs
        assert kwargs["topic"] == KAFKA_TOPICS["ORDER_STATUS_CHANGED"]
        assert kwargs["key"] == str(order.id)
        assert kwargs["event_data"]["to_status"] == "confirmed"
        assert kwargs["event_data"]["from_status"] == "placed"
        assert kwargs["event_data"]["actor_role"] == "vendor"

    def test_assignment_published_to_both_topics(self, mock_kafka, ready_order, partner):
        """Test partner assignment also goes to the assignment topic."""
        AssignmentCoordinator.assign(ready_order.id, partner.id)
        event = OrderEvent.objects.get(order=ready_order, event_type=EventTypes.PARTNER_ASSIGNED)

        assert EventService.publish(event) == 2

        topics = [call.kwargs["topic"] for call in mock_kafka.publish.call_args_list]
        assert topics == [KAFKA_TOPICS["ORDER_STATUS_CHANGED"], KAFKA_TOPICS["PARTNER_ASSIGNED"]]

    def test_republish_is_skipped(self, mock_kafka, order):
        """Test an event already published is not sent again."""
        event = order.events.get()

        assert EventService.publish(event) == 1
        assert EventService.publish(event) == 0
        assert mock_kafka.publish.call_count == 1

    def test_failed_publish_can_be_retried(self, mock_kafka, order):
        """Test a failed publish is not remembered as published."""
        event = order.events.get()
        mock_kafka.publish.return_value = False

        assert EventService.publish(event) == 0
        assert not is_event_processed(event.id, KAFKA_TOPICS["ORDER_STATUS_CHANGED"])

    def test_processed_marker(self, db):
        """Test the idempotency marker is per topic."""
        mark_event_processed("evt-1", "topic-a")

        assert is_event_processed("evt-1", "topic-a")
        assert not is_event_processed("evt-1", "topic-b")


# ==============================================================================
# KAFKA CLIENT TESTS
# ==============================================================================

@pytest.mark.django_db
class TestKafkaClient:
    """Tests for the producer wrapper and dead letter handling."""

    def test_publish_success(self):
        """Test a delivered message returns True."""
        with patch("infrastructure.kafka_client.Producer") as producer_cls:
            client = KafkaClient()
            assert client.publish("orders", {"order_id": "abc"}, key="abc")

        producer = producer_cls.return_value
        producer.produce.assert_called_once()
        assert producer.produce.call_args.kwargs["key"] == b"abc"
        assert not DeadLetterQueue.objects.exists()

    def test_delivery_error_goes_to_dlq(self):
        """Test a delivery callback error lands the message in the DLQ."""
        with patch("infrastructure.kafka_client.Producer") as producer_cls:
            producer_cls.return_value.produce.side_effect = (
                lambda topic, value, callback, **kwargs: callback("broker down", None)
            )
            client = KafkaClient()
            assert not client.publish("orders", {"order_id": "abc"})

        entry = DeadLetterQueue.objects.get()
        assert entry.topic == "orders"
        assert entry.status == "pending"
        assert entry.error_message == "broker down"
        assert entry.event_data == {"order_id": "abc"}

    def test_buffer_error_without_dead_letter(self):
        """Test a full local queue fails quietly when dead lettering is off."""
        with patch("infrastructure.kafka_client.Producer") as producer_cls:
            producer_cls.return_value.produce.side_effect = BufferError("queue full")
            client = KafkaClient()
            assert not client.publish("orders", {"order_id": "abc"}, dead_letter=False)

        assert not DeadLetterQueue.objects.exists()

    @pytest.mark.parametrize("retries, minutes", [(0, 1), (1, 2), (3, 8), (6, 60), (10, 60)])
    def test_dlq_backoff(self, retries, minutes):
        """Test backoff doubles and is capped at an hour."""
        assert dlq_backoff(retries) == timedelta(minutes=minutes)


# ==============================================================================
# DLQ COMMAND TESTS
# ==============================================================================

@pytest.mark.django_db
class TestProcessDLQ:
    """Tests for the process_dlq management command."""

    def make_entry(self, **overrides):
        data = {
            "topic": KAFKA_TOPICS["ORDER_STATUS_CHANGED"],
            "event_data": {"order_id": "abc", "to_status": "confirmed"},
            "next_retry_at": timezone.now() - timedelta(minutes=1),
        }
        data.update(overrides)
        return DeadLetterQueue.objects.create(**data)

    def run(self):
        out = StringIO()
        call_command("process_dlq", stdout=out)
        return out.getvalue()

    def test_successful_retry(self):
        """Test a republished entry is marked processed."""
        entry = self.make_entry()

        with patch("apps.events.management.commands.process_dlq.kafka_client") as client:
            client.publish.return_value = True
            output = self.run()

        entry.refresh_from_db()
        assert entry.status == "processed"
        assert entry.processed_at is not None
        assert "Succeeded: 1" in output
        assert client.publish.call_args.kwargs["dead_letter"] is False
        assert client.publish.call_args.kwargs["key"] == "abc"

    def test_failed_retry_backs_off(self):
        """Test a failed retry is rescheduled with a longer delay."""
        entry = self.make_entry()

        with patch("apps.events.management.commands.process_dlq.kafka_client") as client:
            client.publish.return_value = False
            self.run()

        entry.refresh_from_db()
        assert entry.status == "pending"
        assert entry.retry_count == 1
        assert entry.next_retry_at > timezone.now() + timedelta(minutes=1)

    def test_last_retry_marks_failed(self):
        """Test an entry out of retries is marked failed."""
        entry = self.make_entry(retry_count=4)

        with patch("apps.events.management.commands.process_dlq.kafka_client") as client:
            client.publish.return_value = False
            self.run()

        entry.refresh_from_db()
        assert entry.status == "failed"
        assert entry.retry_count == 5

    def test_entries_not_due_are_left(self):
        """Test entries still backing off are not retried."""
        entry = self.make_entry(next_retry_at=timezone.now() + timedelta(minutes=30))

        with patch("apps.events.management.commands.process_dlq.kafka_client") as client:
            self.run()

        client.publish.assert_not_called()
        entry.refresh_from_db()
        assert entry.status == "pending"


class TestCreateKafkaTopics:
    """Tests for the topic creation command."""

    def run(self, futures=None, *args):
        with patch("apps.events.management.commands.create_kafka_topics.AdminClient") as admin_cls:
            admin = admin_cls.return_value
            admin.create_topics.return_value = futures or {
                name: MagicMock() for name in KAFKA_TOPICS.values()
            }
            out = StringIO()
            call_command("create_kafka_topics", *args, stdout=out)
        return admin.create_topics.call_args.args[0], out.getvalue()

    def failed_future(self, code):
        future = MagicMock()
        future.result.side_effect = KafkaException(KafkaError(code))
        return future

    def test_topics_follow_layout(self):
        """Test each topic is created with its own partitions and retention."""
        created, out = self.run()

        layout = {topic.topic: topic for topic in created}
        assert sorted(layout) == sorted(KAFKA_TOPICS.values())
        for name, expected in KAFKA_TOPIC_SETTINGS.items():
            assert layout[name].num_partitions == expected["partitions"]
            assert layout[name].config == expected["config"]
        assert "2/2 topics ready" in out

    def test_partitions_override(self):
        """Test --partitions applies to every topic."""
        created, _ = self.run(None, "--partitions", "12")

        assert {topic.num_partitions for topic in created} == {12}

    def test_existing_topic_counts_as_ready(self):
        """Test a topic that already exists is not an error."""
        status_topic, assigned_topic = KAFKA_TOPICS.values()
        futures = {
            status_topic: self.failed_future(KafkaError.TOPIC_ALREADY_EXISTS),
            assigned_topic: MagicMock(),
        }

        _, out = self.run(futures)

        assert "already exists" in out
        assert "2/2 topics ready" in out

    def test_failure_raises(self):
        """Test a broker refusal fails the command."""
        status_topic, assigned_topic = KAFKA_TOPICS.values()
        futures = {
            status_topic: MagicMock(),
            assigned_topic: self.failed_future(KafkaError.INVALID_REPLICATION_FACTOR),
        }

        with pytest.raises(CommandError, match=assigned_topic):
            self.run(futures)
