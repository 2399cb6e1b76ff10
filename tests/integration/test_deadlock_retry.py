"""
Integration tests for deadlock retry

Verifica que el retry automático de fallas transitorias funciona correctamente:
- Detecta errores MySQL 1213 (Deadlock), 1205 (Lock wait timeout) y SQLite "database is locked"
- Reintenta automáticamente con exponential backoff
- Se rinde después del max_attempts
"""

import pytest
from sqlalchemy.exc import OperationalError

from rental_engine.domain.errors import OverlappingOrderError, StoreUnavailableError
from rental_engine.infrastructure.db.retry import (
    is_deadlock_error,
    retry_on_deadlock,
    with_deadlock_retry,
)


def _deadlock() -> OperationalError:
    return OperationalError(
        "statement",
        "params",
        "(pymysql.err.OperationalError) (1213, 'Deadlock found')",
        connection_invalidated=False,
    )


class TestDeadlockDetection:
    """Tests para verificar detección de deadlocks"""

    def test_detect_mysql_deadlock_error_1213(self):
        assert is_deadlock_error(_deadlock()), "Error 1213 no detectado como deadlock"

    def test_detect_mysql_lock_timeout_error_1205(self):
        error = OperationalError(
            "statement",
            "params",
            "(pymysql.err.OperationalError) (1205, 'Lock wait timeout exceeded')",
            connection_invalidated=False,
        )

        assert is_deadlock_error(error), "Error 1205 no detectado como deadlock"

    def test_detect_sqlite_lock(self):
        error = OperationalError("statement", "params", "database is locked", connection_invalidated=False)

        assert is_deadlock_error(error)

    def test_store_unavailable_uses_retryable_flag(self):
        assert is_deadlock_error(StoreUnavailableError("lock", retryable=True))
        assert not is_deadlock_error(StoreUnavailableError("disco lleno"))

    def test_ignore_non_deadlock_errors(self):
        assert not is_deadlock_error(Exception("Generic error"))
        assert not is_deadlock_error(OverlappingOrderError("veh-1", "ord-1"))

        other_op_error = OperationalError(
            "statement",
            "params",
            "(pymysql.err.OperationalError) (2013, 'Lost connection to MySQL server')",
            connection_invalidated=False,
        )
        assert not is_deadlock_error(other_op_error)


class TestRetryLogic:
    """Tests para verificar lógica de retry"""

    @pytest.mark.asyncio
    async def test_retry_succeeds_on_first_attempt(self):
        call_count = 0

        async def successful_func():
            nonlocal call_count
            call_count += 1
            return "success"

        result = await retry_on_deadlock(successful_func, max_attempts=3)

        assert result == "success"
        assert call_count == 1, "No debería haber retries si tiene éxito"

    @pytest.mark.asyncio
    async def test_retry_on_deadlock_until_success(self):
        call_count = 0

        async def func_fails_twice_then_succeeds():
            nonlocal call_count
            call_count += 1
            if call_count <= 2:
                raise _deadlock()
            return "success_after_retries"

        result = await retry_on_deadlock(func_fails_twice_then_succeeds, max_attempts=3, base_delay=0.01)

        assert result == "success_after_retries"
        assert call_count == 3, "Debería haber reintentado 2 veces antes de tener éxito"

    @pytest.mark.asyncio
    async def test_retry_fails_after_max_attempts(self):
        call_count = 0

        async def always_fails():
            nonlocal call_count
            call_count += 1
            raise _deadlock()

        with pytest.raises(OperationalError):
            await retry_on_deadlock(always_fails, max_attempts=3, base_delay=0.01)

        assert call_count == 3, "Debería haber intentado max_attempts veces"

    @pytest.mark.asyncio
    async def test_domain_errors_not_retried(self):
        call_count = 0

        async def conflicts():
            nonlocal call_count
            call_count += 1
            raise OverlappingOrderError("veh-1", "ord-1")

        with pytest.raises(OverlappingOrderError):
            await retry_on_deadlock(conflicts, max_attempts=3)

        assert call_count == 1, "Los conflictos de negocio no se reintentan"


class TestDecorator:
    """Tests para el decorator @with_deadlock_retry"""

    @pytest.mark.asyncio
    async def test_decorator_basic_usage(self):
        call_count = 0

        @with_deadlock_retry(max_attempts=3, base_delay=0.01)
        async def decorated_func(now):
            nonlocal call_count
            call_count += 1
            if call_count == 1:
                raise StoreUnavailableError("database is locked", retryable=True)
            return now

        result = await decorated_func("2026-06-01")

        assert result == "2026-06-01"
        assert call_count == 2
