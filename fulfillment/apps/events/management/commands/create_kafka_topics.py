"""
Create the order event topics with their partition and retention layout.
"""
from confluent_kafka import KafkaError, KafkaException
from confluent_kafka.admin import AdminClient, NewTopic
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from apps.events.constants import KAFKA_TOPIC_SETTINGS


class Command(BaseCommand):
    help = "Creates the order event topics published by the fulfillment service"

    def add_arguments(self, parser):
        parser.add_argument(
            "--partitions",
            type=int,
            help="Override the partition count of every topic",
        )
        parser.add_argument(
            "--replication-factor",
            type=int,
            default=1,
            help="Replication factor for each topic (default: 1)",
        )
        parser.add_argument(
            "--timeout",
            type=float,
            default=30,
            help="Seconds to wait for the brokers to create each topic",
        )

    def build_topics(self, partitions, replication_factor):
        return [
            NewTopic(
                name,
                num_partitions=partitions or layout["partitions"],
                replication_factor=replication_factor,
                config=layout["config"],
            )
            for name, layout in KAFKA_TOPIC_SETTINGS.items()
        ]

    def handle(self, *args, **options):
        if not settings.KAFKA_BOOTSTRAP_SERVERS:
            raise CommandError("KAFKA_BOOTSTRAP_SERVERS is not configured")

        admin_client = AdminClient({"bootstrap.servers": settings.KAFKA_BOOTSTRAP_SERVERS})
        topics = self.build_topics(options["partitions"], options["replication_factor"])
        futures = admin_client.create_topics(topics, request_timeout=options["timeout"])

        ready, failed = 0, []
        for name, future in futures.items():
            try:
                future.result(timeout=options["timeout"])
                self.stdout.write(self.style.SUCCESS(f"Created {name}"))
                ready += 1
            except KafkaException as e:
                error = e.args[0]
                if error.code() == KafkaError.TOPIC_ALREADY_EXISTS:
                    self.stdout.write(self.style.WARNING(f"{name} already exists"))
                    ready += 1
                else:
                    failed.append(name)
                    self.stdout.write(self.style.ERROR(f"Could not create {name}: {error.str()}"))

        self.stdout.write(f"{ready}/{len(topics)} topics ready")
        if failed:
            raise CommandError(f"Topic creation failed for: {', '.join(failed)}")
