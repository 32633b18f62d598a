import uuid

import redis

from artisan_market.utils.settings import REDIS_URL, AUCTION_LOCK_TTL_SECONDS
from artisan_market.utils.logging import get_logger
from artisan_market.utils.retry import redis_retry

logger = get_logger(__name__)

#compare-and-delete, runs atomically inside redis
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#only the owner token that set the key may delete it, so an expired lock
#re-acquired by someone else is never released by the previous holder


class LockService:
    """
    -short lived exclusive locks in redis (SET NX EX)
    -release through lua so only the owner can unlock
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @redis_retry()
    def acquire(self, key: str, owner: str, ttl: int) -> bool:
        logger.info(f"Acquire lock {key} for {owner}")
        #SET auction:1:lock "<token>" NX EX 5
        return bool(
            self.redis.set(
                name=key,
                value=owner,
                nx=True,
                ex=ttl,
            )
        )

    @redis_retry()
    def release(self, key: str, owner: str) -> bool:
        logger.info(f"Release lock {key} for {owner}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, owner)
        return bool(res)

    # auctions

    @staticmethod
    def auction_key(auction_id: int) -> str:
        return f"auction:{auction_id}:lock"

    @staticmethod
    def new_owner_token() -> str:
        return uuid.uuid4().hex

    def acquire_auction_lock(self, auction_id: int, owner: str, ttl: int = AUCTION_LOCK_TTL_SECONDS) -> bool:
        return self.acquire(self.auction_key(auction_id), owner, ttl)

    def release_auction_lock(self, auction_id: int, owner: str) -> bool:
        return self.release(self.auction_key(auction_id), owner)
