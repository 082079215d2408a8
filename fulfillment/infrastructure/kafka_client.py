import json
import logging
from datetime import timedelta

from confluent_kafka import KafkaException, Producer
from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.utils import timezone

logger = logging.getLogger(__name__)


def dlq_backoff(retry_count, cap_minutes=60):
    """Exponential backoff for the next DLQ retry, capped at ``cap_minutes``."""
    return timedelta(minutes=min(2**retry_count, cap_minutes))


class KafkaClient:
    def __init__(self):
        self._producer = None

    @property
    def producer(self):
        # Created on first publish so importing this module never dials the broker
        if self._producer is None:
            self._producer = Producer(
                {
                    "bootstrap.servers": settings.KAFKA_BOOTSTRAP_SERVERS,
                    "client.id": settings.KAFKA_CLIENT_ID,
                }
            )
        return self._producer

    def publish(self, topic: str, event_data: dict, key=None, dead_letter=True):
        """Publish event to Kafka topic, with automatic DLQ on failure"""
        delivery_failed = {"failed": False, "error": None}

        def delivery_callback(err, msg):
            if err is not None:
                delivery_failed["failed"] = True
                delivery_failed["error"] = str(err)
                logger.error(f"Message delivery to {topic} failed: {err}")

        try:
            produce_kwargs = {
                "value": json.dumps(event_data, cls=DjangoJSONEncoder).encode("utf-8"),
                "callback": delivery_callback,
            }
            if key:
                produce_kwargs["key"] = key.encode("utf-8") if isinstance(key, str) else key

            self.producer.produce(topic, **produce_kwargs)
            self.producer.poll(0)  # Trigger delivery callbacks
            self.producer.flush(timeout=5)
        except (KafkaException, BufferError) as e:
            logger.error(f"Kafka error publishing to {topic}: {e}")
            delivery_failed = {"failed": True, "error": str(e)}

        if delivery_failed["failed"]:
            if dead_letter:
                self._send_to_dlq(topic, event_data, delivery_failed["error"])
            return False
        return True

    def _send_to_dlq(self, topic: str, event_data: dict, error_message: str):
        """Send failed event to Dead Letter Queue"""
        from apps.events.models import DeadLetterQueue

        DeadLetterQueue.objects.create(
            topic=topic,
            event_data=json.loads(json.dumps(event_data, cls=DjangoJSONEncoder)),
            error_message=error_message,
            retry_count=0,
            status="pending",
            next_retry_at=timezone.now() + dlq_backoff(0),
        )
        logger.warning(f"Event sent to DLQ: {topic}")

    def check_connection(self, timeout=2):
        try:
            self.producer.list_topics(timeout=timeout)
        except KafkaException as e:
            logger.error(f"Kafka connection error: {e}")
            raise ValueError(f"Kafka connection error: {e}")

    def close(self):
        if self._producer is not None:
            self._producer.flush()


kafka_client = KafkaClient()
