import httpx
import asyncio
import logging
import time
from roadside.core.config import settings
from roadside.core.metrics import webhook_deliveries, webhook_duration

logger = logging.getLogger(__name__)


def status_change_payload(service) -> dict:
    return {
        "service_id": service.id,
        "status": str(service.status),
        "price": service.price,
        "estimated_arrival_time": service.estimated_arrival_time.isoformat()
        if service.estimated_arrival_time else None,
        "service_provider_id": service.service_provider_id,
    }


async def send_webhook(payload: dict, retries: int | None = None) -> bool:

    if not settings.WEBHOOK_URL:
        return False

    if retries is None:
        retries = settings.WEBHOOK_RETRIES

    backoff = 1.0

    for attempt in range(1, retries + 1):
        start_time = time.time()
        try:
            async with httpx.AsyncClient(timeout=settings.WEBHOOK_TIMEOUT) as client:
                response = await client.post(settings.WEBHOOK_URL, json=payload)

            if 200 <= response.status_code < 300:
                webhook_deliveries.labels(status="success", retry_count=str(attempt - 1)).inc()
                webhook_duration.labels(status="success").observe(time.time() - start_time)
                logger.info(f"Webhook delivery succeeded for service {payload.get('service_id')}")
                return True
            else:
                logger.warning(
                    f"Webhook delivery failed (attempt {attempt}/{retries}): "
                    f"Status {response.status_code} for service {payload.get('service_id')}"
                )
        except httpx.TimeoutException:
            logger.warning(
                f"Webhook timeout (attempt {attempt}/{retries}) for service {payload.get('service_id')}"
            )
        except httpx.HTTPError as e:
            logger.warning(
                f"Webhook delivery error (attempt {attempt}/{retries}): {e} "
                f"for service {payload.get('service_id')}"
            )

        webhook_deliveries.labels(status="failure", retry_count=str(attempt - 1)).inc()
        webhook_duration.labels(status="failure").observe(time.time() - start_time)

        if attempt < retries:
            await asyncio.sleep(backoff)
            backoff *= 2.0

    logger.error(f"Webhook delivery failed after {retries} attempts for service {payload.get('service_id')}")
    return False
