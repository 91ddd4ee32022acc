"""Unit tests for sm_common: clock, id sequences, error codes, hex codec."""

import pytest
from pydantic import BaseModel, ValidationError

from src.sm_common.clock import CHALLENGE_WINDOW_SECONDS, WEEK_SECONDS, ManualClock, SystemClock
from src.sm_common.errors import (
    AppError,
    BillNotFoundError,
    ChallengeNotFoundError,
    CommitmentMismatchError,
    InsufficientBalanceError,
    InvalidRangeError,
    InvalidStateError,
    NotFoundError,
    OrderNotFoundError,
    PermissionDeniedError,
    TimeoutNotElapsedError,
)
from src.sm_common.hexcodec import HexBytes, HexHash
from src.sm_common.id_generator import SequenceIdGenerator


class TestClock:
    def test_constants(self) -> None:
        assert WEEK_SECONDS == 604_800
        assert CHALLENGE_WINDOW_SECONDS == WEEK_SECONDS

    def test_manual_clock_advances(self) -> None:
        clock = ManualClock(start=100)
        assert clock.now() == 100
        assert clock.advance(50) == 150
        clock.set(200)
        assert clock.now() == 200

    def test_manual_clock_never_moves_backwards(self) -> None:
        clock = ManualClock(start=100)
        with pytest.raises(ValueError):
            clock.advance(-1)
        with pytest.raises(ValueError):
            clock.set(99)

    def test_system_clock_non_decreasing(self) -> None:
        clock = SystemClock()
        first = clock.now()
        assert clock.now() >= first > 0


class TestSequenceIdGenerator:
    def test_starts_at_one(self) -> None:
        gen = SequenceIdGenerator()
        assert [gen.next_id() for _ in range(3)] == [1, 2, 3]

    def test_restore_rewinds(self) -> None:
        gen = SequenceIdGenerator()
        pos = gen.position
        gen.next_id()
        gen.restore(pos)
        assert gen.next_id() == 1

    def test_rejects_zero_start(self) -> None:
        with pytest.raises(ValueError):
            SequenceIdGenerator(start=0)


class TestErrors:
    @pytest.mark.parametrize(
        ("error", "code", "status"),
        [
            (PermissionDeniedError("x"), 1002, 403),
            (InsufficientBalanceError(10, 5), 2001, 422),
            (BillNotFoundError(1), 3001, 404),
            (OrderNotFoundError(1), 4001, 404),
            (InvalidRangeError("x"), 4002, 422),
            (InvalidStateError("x"), 4003, 409),
            (CommitmentMismatchError(1), 4004, 409),
            (ChallengeNotFoundError(1), 5001, 404),
            (TimeoutNotElapsedError(1, 99), 5003, 409),
        ],
    )
    def test_codes_and_status(self, error: AppError, code: int, status: int) -> None:
        assert error.code == code
        assert error.http_status == status

    def test_not_found_family(self) -> None:
        for err in (BillNotFoundError(1), OrderNotFoundError(2), ChallengeNotFoundError(3)):
            assert isinstance(err, NotFoundError)

    def test_message_carries_amounts(self) -> None:
        err = InsufficientBalanceError(required=80, available=10)
        assert "80" in err.message and "10" in err.message


class _Payload(BaseModel):
    root: HexHash
    blob: HexBytes


class TestHexCodec:
    def test_accepts_prefixed_and_bare(self) -> None:
        bare = _Payload(root="ab" * 32, blob="0x0102")
        assert bare.root == bytes([0xAB]) * 32
        assert bare.blob == b"\x01\x02"

    def test_rejects_wrong_hash_length(self) -> None:
        with pytest.raises(ValidationError):
            _Payload(root="ab" * 31, blob="")

    def test_rejects_non_hex(self) -> None:
        with pytest.raises(ValidationError):
            _Payload(root="zz" * 32, blob="")

    def test_empty_blob_allowed(self) -> None:
        assert _Payload(root="00" * 32, blob="").blob == b""
