"""Tests for the lifecycle guard."""
import asyncio
import os
import signal
import sys

import pytest

from real_browser_mcp.graceful_shutdown import LifecycleGuard


class TestShutdownSequence:

    @pytest.mark.asyncio
    async def test_handlers_run_in_order_once(self):
        events = []
        guard = LifecycleGuard()

        async def close_browser():
            events.append("close")

        def kill_processes():
            events.append("kill")

        guard.register_shutdown_handler(close_browser)
        guard.register_shutdown_handler(kill_processes)
        guard.register_shutdown_handler(close_browser)

        assert await guard.shutdown("SIGTERM") is True
        assert await guard.shutdown("SIGINT") is False
        assert events == ["close", "kill"]
        assert guard.completed

    @pytest.mark.asyncio
    async def test_concurrent_triggers_clean_up_once(self):
        events = []
        guard = LifecycleGuard()

        async def slow_close():
            await asyncio.sleep(0.01)
            events.append("close")

        guard.register_shutdown_handler(slow_close)
        results = await asyncio.gather(*(guard.shutdown(f"trigger-{i}") for i in range(5)))

        assert sorted(results) == [False, False, False, False, True]
        assert events == ["close"]

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_stop_the_rest(self):
        events = []
        guard = LifecycleGuard()

        async def broken():
            raise RuntimeError("browser already gone")

        async def kill_processes():
            events.append("kill")

        guard.register_shutdown_handler(broken)
        guard.register_shutdown_handler(kill_processes)

        assert await guard.shutdown("test") is True
        assert events == ["kill"]

    @pytest.mark.asyncio
    async def test_hung_handler_is_abandoned(self):
        events = []
        guard = LifecycleGuard(handler_timeout=0.05)

        async def hang():
            await asyncio.sleep(60)

        async def kill_processes():
            events.append("kill")

        guard.register_shutdown_handler(hang)
        guard.register_shutdown_handler(kill_processes)

        await asyncio.wait_for(guard.shutdown("test"), timeout=5)
        assert events == ["kill"]

    @pytest.mark.asyncio
    async def test_exit_callbacks_run_after_cleanup(self):
        events = []
        guard = LifecycleGuard()

        async def close_browser():
            events.append("close")

        guard.register_shutdown_handler(close_browser)
        guard.register_exit_callback(lambda: events.append("exit"))

        await guard.shutdown("test")
        await guard.shutdown("again")

        assert events == ["close", "exit"]

    def test_remove_shutdown_handler(self):
        guard = LifecycleGuard()
        events = []

        def handler():
            events.append("ran")

        guard.register_shutdown_handler(handler)
        guard.remove_shutdown_handler(handler)
        asyncio.run(guard.shutdown("test"))

        assert events == []


class TestProcessHooks:

    @pytest.mark.asyncio
    async def test_unhandled_task_failure_triggers_cleanup(self):
        events = []
        guard = LifecycleGuard()

        async def close_browser():
            events.append("close")

        guard.register_shutdown_handler(close_browser)
        guard.install(install_signals=False)
        try:
            loop = asyncio.get_running_loop()
            loop.call_exception_handler({"message": "Task exception was never retrieved", "exception": ValueError("x")})
            for _ in range(10):
                await asyncio.sleep(0)
                if guard.completed:
                    break
        finally:
            guard.uninstall()

        assert events == ["close"]

    @pytest.mark.asyncio
    async def test_install_and_uninstall_restore_excepthook(self):
        original = sys.excepthook
        guard = LifecycleGuard()

        guard.install(install_signals=False)
        assert sys.excepthook == guard._handle_uncaught_exception
        guard.uninstall()

        assert sys.excepthook is original

    def test_uncaught_exception_runs_cleanup_without_a_loop(self):
        events = []
        forwarded = []
        guard = LifecycleGuard()

        async def close_browser():
            events.append("close")

        guard.register_shutdown_handler(close_browser)
        guard._original_excepthook = lambda *exc_info: forwarded.append(exc_info[0])

        guard._handle_uncaught_exception(RuntimeError, RuntimeError("fatal"), None)

        assert events == ["close"]
        assert forwarded == [RuntimeError]

    @pytest.mark.asyncio
    async def test_markup_in_error_text_does_not_abort_cleanup(self):
        events = []
        guard = LifecycleGuard()

        async def close_browser():
            raise RuntimeError("target closed [/pid=1]")

        async def kill_processes():
            events.append("kill")

        guard.register_shutdown_handler(close_browser)
        guard.register_shutdown_handler(kill_processes)

        assert await guard.shutdown("SIGTERM [/x]") is True
        assert events == ["kill"]

    @pytest.mark.asyncio
    async def test_markup_in_unhandled_failure_is_logged(self):
        guard = LifecycleGuard()
        loop = asyncio.get_running_loop()

        guard._handle_loop_exception(loop, {"message": "task died [/bold]", "exception": ValueError("[/x]")})
        for _ in range(10):
            await asyncio.sleep(0)
            if guard.completed:
                break

        assert guard.completed


@pytest.mark.skipif(sys.platform == "win32", reason="loop signal handlers are unavailable on Windows")
class TestSignals:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("sig", [signal.SIGTERM, signal.SIGINT])
    async def test_signal_runs_cleanup(self, sig):
        events = []
        guard = LifecycleGuard()

        async def close_browser():
            events.append("close")

        guard.register_shutdown_handler(close_browser)
        guard.install()
        try:
            os.kill(os.getpid(), sig)
            for _ in range(100):
                await asyncio.sleep(0.01)
                if guard.completed:
                    break
        finally:
            guard.uninstall()

        assert events == ["close"]

    @pytest.mark.asyncio
    async def test_second_signal_during_cleanup_forces_exit(self):
        events = []
        guard = LifecycleGuard()
        release = asyncio.Event()

        async def slow_close():
            events.append("close")
            await release.wait()

        guard.register_shutdown_handler(slow_close)
        guard.install(install_signals=False)
        try:
            guard._handle_signal("SIGTERM")
            await asyncio.sleep(0)
            with pytest.raises(SystemExit):
                guard._handle_signal("SIGINT")
            release.set()
            for _ in range(10):
                await asyncio.sleep(0)
                if guard.completed:
                    break
        finally:
            guard.uninstall()

        assert events == ["close"]
        assert guard.completed
