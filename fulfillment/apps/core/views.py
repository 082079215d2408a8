from django.conf import settings
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from infrastructure.cache import check_cache_connection
from infrastructure.database import check_database_connection
from infrastructure.kafka_client import kafka_client

SERVICE_NAME = "order-fulfillment"


class HealthCheckView(APIView):
    """Liveness: the process is up and serving requests."""

    permission_classes = []

    def get(self, request):
        return Response({"status": "healthy", "service": SERVICE_NAME}, status=status.HTTP_200_OK)


class ReadinessCheckView(APIView):
    """Readiness: every backing service answers. Kafka is only probed when enabled."""

    permission_classes = []

    def get(self, request):
        probes = {
            "database": check_database_connection,
            "cache": check_cache_connection,
        }
        if settings.KAFKA_ENABLED:
            probes["kafka"] = kafka_client.check_connection

        checks = {name: passes(probe) for name, probe in probes.items()}
        ready = all(checks.values())
        return Response(
            {"status": "ready" if ready else "not_ready", "checks": checks},
            status=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        )


def passes(probe):
    try:
        probe()
    except ValueError:
        return False
    return True
