from __future__ import annotations

import logging
import os
import threading

import redis

logger = logging.getLogger(__name__)

CLIENT_NAME = "floorops"

_clients: dict[tuple[str, float], redis.Redis] = {}
_clients_lock = threading.Lock()


def _redis_url() -> str:
    url = os.getenv("REDIS_URL")
    if not url:
        raise RuntimeError("REDIS_URL is not set")
    return url


def get_redis_client(timeout_seconds: float = 1.0) -> redis.Redis:
    key = (_redis_url(), timeout_seconds)
    with _clients_lock:
        client = _clients.get(key)
        if client is None:
            client = redis.Redis.from_url(
                key[0],
                socket_connect_timeout=timeout_seconds,
                socket_timeout=timeout_seconds,
                client_name=CLIENT_NAME,
                health_check_interval=30,
            )
            _clients[key] = client
    return client


def reset_redis_clients() -> None:
    with _clients_lock:
        clients = list(_clients.values())
        _clients.clear()
    for client in clients:
        client.close()


def ping_redis(timeout_seconds: float = 1.0) -> bool:
    try:
        return bool(get_redis_client(timeout_seconds).ping())
    except (redis.RedisError, RuntimeError):
        logger.warning("redis_ping_failed", exc_info=True)
        return False
