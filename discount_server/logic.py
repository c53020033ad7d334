import logging
import secrets
from typing import List

from .models import DiscountCodeResult
from .storage import CodeStore

log = logging.getLogger(__name__)

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"

MIN_CODE_LENGTH = 7
MAX_CODE_LENGTH = 8
MAX_CODES_PER_REQUEST = 2000


def generate_code(length: int) -> str:
    # byte % 36 is slightly biased towards the first 4 symbols; accepted
    return "".join(ALPHABET[b % len(ALPHABET)] for b in secrets.token_bytes(length))


def is_valid_generate_request(count: int, length: int) -> bool:
    if count <= 0 or count > MAX_CODES_PER_REQUEST:
        return False
    return MIN_CODE_LENGTH <= length <= MAX_CODE_LENGTH


def is_blank(code: str) -> bool:
    return not code or code.isspace()


class DiscountService:
    """
    Request-level validation on top of a CodeStore.

    Business outcomes are returned, never raised: generate_codes signals
    rejection with an empty list, use_code with a DiscountCodeResult.
    """

    def __init__(self, store: CodeStore) -> None:
        self.store = store

    def generate_codes(self, count: int, length: int) -> List[str]:
        if not is_valid_generate_request(count, length):
            log.debug("Rejected generate request count=%s length=%s", count, length)
            return []

        new_codes: List[str] = []
        with self.store.lock:
            for _ in range(count):
                # No retry cap: 36**7 candidates against a few thousand codes
                code = generate_code(length)
                while self.store.contains(code):
                    code = generate_code(length)

                self.store.insert(code)
                new_codes.append(code)
            self.store.save()

        log.info("Generated %d codes of length %d", len(new_codes), length)
        return new_codes

    def use_code(self, code: str) -> DiscountCodeResult:
        if is_blank(code):
            return DiscountCodeResult.INVALID_REQUEST

        with self.store.lock:
            result = self.store.try_mark_used(code)

        log.debug("Use code %r -> %s", code, result.name)
        return result
