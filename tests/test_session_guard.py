"""Unit tests for roster.client.session_guard: detection and the one-shot sign-out."""

import asyncio
import logging
import sys
import threading
import unittest

import httpx

from roster.client.api_client import ApiError, RosterClient
from roster.client.session_guard import (
    SessionGuard,
    install_session_guard,
    session_error_code,
    uninstall_session_guard,
    watch_loop,
)
from roster.core.exceptions import (
    AccountInactiveError,
    InsufficientRoleError,
    NoSystemAccessError,
    NotAuthenticatedError,
)


class TestSessionErrorCode(unittest.TestCase):
    """Codes match by equality from an attribute, a key or a leading prefix."""

    def test_roster_errors(self) -> None:
        self.assertEqual(session_error_code(NotAuthenticatedError()), "NOT_AUTHENTICATED")
        self.assertEqual(session_error_code(AccountInactiveError("off")), "ACCOUNT_INACTIVE")
        self.assertIsNone(session_error_code(InsufficientRoleError("administrator")))

    def test_api_error_and_mapping(self) -> None:
        self.assertEqual(session_error_code(ApiError(401, "NO_SYSTEM_ACCESS", "x")), "NO_SYSTEM_ACCESS")
        self.assertEqual(session_error_code({"code": "IDENTITY_NOT_FOUND"}), "IDENTITY_NOT_FOUND")
        self.assertIsNone(session_error_code({"code": "CONFLICT"}))

    def test_text_prefix_only(self) -> None:
        self.assertEqual(session_error_code("[IDENTITY_NOT_FOUND] Personnel 3 not found"), "IDENTITY_NOT_FOUND")
        self.assertIsNone(session_error_code("query failed: IDENTITY_NOT_FOUND somewhere"))
        self.assertIsNone(session_error_code("[IDENTITY_NOT_FOUND_X] nope"))

    def test_wrapped_exception(self) -> None:
        try:
            try:
                raise NoSystemAccessError("gone")
            except NoSystemAccessError as inner:
                raise RuntimeError("page load failed") from inner
        except RuntimeError as outer:
            self.assertEqual(session_error_code(outer), "NO_SYSTEM_ACCESS")

    def test_unrelated_code_attribute(self) -> None:
        err = OSError(2, "No such file")
        self.assertIsNone(session_error_code(err))


class GuardTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.calls: list[str] = []
        self.guard = SessionGuard(self.calls.append, login_path="/login")

    def tearDown(self) -> None:
        self.guard.uninstall()


class TestObserve(GuardTestCase):
    def test_fires_once(self) -> None:
        self.assertTrue(self.guard.observe(NotAuthenticatedError()))
        self.assertFalse(self.guard.observe(AccountInactiveError("off")))
        self.assertEqual(self.calls, ["/login"])
        self.assertTrue(self.guard.fired)

    def test_rearm_allows_the_next_sign_out(self) -> None:
        self.assertTrue(self.guard.observe(NotAuthenticatedError()))
        self.guard.rearm()
        self.assertFalse(self.guard.fired)
        self.assertTrue(self.guard.observe(AccountInactiveError("off")))
        self.assertEqual(self.calls, ["/login", "/login"])

    def test_ignores_other_errors(self) -> None:
        self.assertFalse(self.guard.observe(InsufficientRoleError("administrator")))
        self.assertFalse(self.guard.observe(ValueError("bad")))
        self.assertEqual(self.calls, [])

    def test_concurrent_signals_fire_once(self) -> None:
        barrier = threading.Barrier(8)

        def signal() -> None:
            barrier.wait()
            self.guard.observe(NotAuthenticatedError())

        threads = [threading.Thread(target=signal) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(self.calls, ["/login"])

    def test_inspection_failure_is_swallowed(self) -> None:
        class Hostile(Exception):
            @property
            def code(self) -> str:
                raise RuntimeError("no code for you")

        self.assertFalse(self.guard.observe(Hostile()))

    def test_callback_failure_is_swallowed(self) -> None:
        def explode(path: str) -> None:
            raise RuntimeError("navigation failed")

        guard = SessionGuard(explode, login_path="/login")
        self.assertTrue(guard.observe(NotAuthenticatedError()))


class TestHooks(GuardTestCase):
    def test_install_and_uninstall_restore_hooks(self) -> None:
        previous_sys = sys.excepthook
        previous_threading = threading.excepthook
        self.guard.install()
        self.assertIsNot(sys.excepthook, previous_sys)
        self.guard.uninstall()
        self.assertIs(sys.excepthook, previous_sys)
        self.assertIs(threading.excepthook, previous_threading)

    def test_uncaught_thread_exception(self) -> None:
        seen: list[BaseException] = []
        original = threading.excepthook
        threading.excepthook = lambda args: seen.append(args.exc_value)
        try:
            self.guard.install()

            def boom() -> None:
                raise AccountInactiveError("Account for Hawk is deactivated")

            t = threading.Thread(target=boom)
            t.start()
            t.join()
        finally:
            self.guard.uninstall()
            threading.excepthook = original
        self.assertEqual(self.calls, ["/login"])
        self.assertEqual(len(seen), 1)

    def test_sys_excepthook_chains(self) -> None:
        seen: list[BaseException] = []
        original = sys.excepthook
        sys.excepthook = lambda t, e, tb: seen.append(e)
        try:
            self.guard.install()
            err = NotAuthenticatedError()
            sys.excepthook(type(err), err, None)
        finally:
            self.guard.uninstall()
            sys.excepthook = original
        self.assertEqual(self.calls, ["/login"])
        self.assertEqual(seen, [err])

    def test_error_log_record(self) -> None:
        self.guard.install()
        logging.getLogger("roster.tests.page").error("[NO_SYSTEM_ACCESS] Hawk has no system access")
        self.assertEqual(self.calls, ["/login"])

    def test_warning_log_record_is_ignored(self) -> None:
        self.guard.install()
        logging.getLogger("roster.tests.page").warning("[NO_SYSTEM_ACCESS] Hawk has no system access")
        self.assertEqual(self.calls, [])

    def test_asyncio_unhandled_exception(self) -> None:
        loop = asyncio.new_event_loop()
        forwarded: list[dict] = []
        loop.set_exception_handler(lambda lp, context: forwarded.append(context))
        previous = loop.get_exception_handler()
        try:
            self.guard.watch_loop(loop)
            loop.call_exception_handler(
                {"message": "Task exception was never retrieved", "exception": NotAuthenticatedError()}
            )
            self.guard.uninstall()
            self.assertIs(loop.get_exception_handler(), previous)
        finally:
            loop.close()
        self.assertEqual(self.calls, ["/login"])
        self.assertEqual(len(forwarded), 1)


class TestInstallSessionGuard(unittest.TestCase):
    def tearDown(self) -> None:
        uninstall_session_guard()

    def test_lazy_singleton(self) -> None:
        first = install_session_guard(lambda path: None, login_path="/login")
        second = install_session_guard(lambda path: None)
        self.assertIs(first, second)
        self.assertTrue(first.installed)

    def test_watch_loop_requires_install(self) -> None:
        loop = asyncio.new_event_loop()
        try:
            with self.assertRaises(RuntimeError):
                watch_loop(loop)
        finally:
            loop.close()

    def test_client_login_rearms_the_guard(self) -> None:
        calls: list[str] = []
        guard = install_session_guard(calls.append, login_path="/login")

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"access_token": "fresh", "token_type": "bearer"})

        client = RosterClient(
            "https://roster.test/api/v1", transport=httpx.MockTransport(handler), login_path="/login"
        )
        self.assertTrue(guard.observe(NotAuthenticatedError()))
        client.login("Hawk", "Password1")
        self.assertTrue(guard.observe(NotAuthenticatedError()))
        self.assertEqual(calls, ["/login", "/login"])
