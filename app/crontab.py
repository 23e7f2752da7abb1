"""
Friend health crontab.

Probes every friend link with a plain GET and records the outcome in
friends.health:
  ""              — 2xx response
  "<status code>" — any other response
  "<error>"       — the request raised (DNS, TLS, timeout, ...)

Links are checked one after another; a failing probe never stops the run.
Meant to be started by the host scheduler, e.g.

  0 */6 * * *  python -m app.crontab
"""
import asyncio
import logging
from typing import Optional

import httpx
from prometheus_client import CollectorRegistry, Gauge, push_to_gateway
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import AsyncSessionLocal, engine
from app.models import Friend

logger = logging.getLogger(__name__)


async def check_friends(db: AsyncSession, http: httpx.AsyncClient) -> tuple[int, int]:
    """Probe all friends and store their health. Returns (healthy, unhealthy)."""
    friends = (await db.execute(select(Friend).order_by(Friend.id))).scalars().all()
    logger.info("total friends: %d", len(friends))

    healthy = 0
    unhealthy = 0
    for friend in friends:
        logger.info("checking %s: %s", friend.name, friend.url)
        try:
            resp = await http.get(friend.url)
            logger.info("response status: %s %s", resp.status_code, resp.reason_phrase)
            if resp.is_success:
                health = ""
                healthy += 1
            else:
                health = str(resp.status_code)
                unhealthy += 1
        except Exception as exc:
            health = str(exc) or type(exc).__name__
            logger.error("probe of %s failed: %s", friend.url, health)
            unhealthy += 1

        await db.execute(update(Friend).where(Friend.id == friend.id).values(health=health))
        # One commit per result
        await db.commit()

    logger.info(
        "update friends health done. Total: %d, Healthy: %d, Unhealthy: %d",
        healthy + unhealthy,
        healthy,
        unhealthy,
    )
    return healthy, unhealthy


def push_health(healthy: int, unhealthy: int, gateway: Optional[str] = None) -> bool:
    """
    Push the run's totals to the Prometheus Pushgateway. The job process
    exits right after, so its own registry is never scraped.
    """
    gateway = gateway or settings.pushgateway_url
    if not gateway:
        logger.info("PUSHGATEWAY_URL not set, skipping friend health metrics")
        return False

    registry = CollectorRegistry()
    gauge = Gauge(
        "friend_health_last_run",
        "Friend links by result of the most recent health check",
        ["state"],  # 'healthy' or 'unhealthy'
        registry=registry,
    )
    gauge.labels(state="healthy").set(healthy)
    gauge.labels(state="unhealthy").set(unhealthy)
    try:
        push_to_gateway(gateway, job=settings.friend_check_job, registry=registry)
    except Exception as exc:
        logger.warning("Pushing friend health metrics to %s failed: %s", gateway, exc)
        return False
    return True


async def run() -> tuple[int, int]:
    async with httpx.AsyncClient(
        timeout=settings.friend_check_timeout,
        follow_redirects=True,
        headers={"User-Agent": f"{settings.service_name}/friend-check"},
    ) as http:
        async with AsyncSessionLocal() as session:
            result = await check_friends(session, http)
    await engine.dispose()
    push_health(*result)
    return result


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
    )
    asyncio.run(run())


if __name__ == "__main__":
    main()
