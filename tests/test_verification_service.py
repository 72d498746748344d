import asyncio
import unittest
from dataclasses import replace

from fakes import (
    FailingEmailSender,
    FakeClock,
    RecordingEmailSender,
    RecordingErrorReporter,
    build_service,
    make_config,
)
from verification.exceptions import (
    CryptoError,
    DuplicateEmailError,
    EmailDeliveryError,
    InvalidEmailError,
    TooManyRequestsError,
)
from verification.stores.memory_store import MemoryUserStore, MemoryVerificationStore


class TestIssueAndSend(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.store = MemoryVerificationStore()
        self.sender = RecordingEmailSender()
        self.clock = FakeClock()
        self.service = build_service(
            verification_store=self.store,
            email_sender=self.sender,
            clock=self.clock,
        )

    async def test_first_send_creates_unconfirmed_record(self):
        ticket = await self.service.issue_and_send("new@example.com")

        self.assertEqual(ticket.count, 1)
        self.assertEqual(self.store.count(), 1)
        record = await self.store.find_by_email("new@example.com")
        self.assertFalse(record.confirmed)
        self.assertIsNone(record.confirmed_at)
        self.assertEqual(record.created_at, self.clock.now)
        self.assertEqual(record.sent_at, self.clock.now)

        message = self.sender.sent[0]
        self.assertEqual(message["to"], "new@example.com")
        code = self.sender.last_code()
        self.assertTrue(100000 <= int(code) <= 999999)
        self.assertNotIn(code, record.encrypted_code)

    async def test_resend_overwrites_single_record(self):
        ticket = await self.service.issue_and_send("user@example.com")
        first = await self.store.find_by_email("user@example.com")
        self.assertTrue(await self.service.confirm_code("user@example.com", self.sender.last_code()))

        self.clock.advance(minutes=1)
        ticket = await self.service.issue_and_send("user@example.com", ticket.token)

        self.assertEqual(ticket.count, 2)
        self.assertEqual(self.store.count(), 1)
        record = await self.store.find_by_email("user@example.com")
        self.assertEqual(record.id, first.id)
        self.assertFalse(record.confirmed)
        self.assertIsNone(record.confirmed_at)
        self.assertEqual(record.created_at, self.clock.now)

    async def test_email_key_is_case_insensitive(self):
        await self.service.issue_and_send("Mixed@Example.com")
        await self.service.issue_and_send("mixed@example.com")
        self.assertEqual(self.store.count(), 1)

    async def test_rate_limit_blocks_sixth_send(self):
        token = None
        for _ in range(5):
            token = (await self.service.issue_and_send("busy@example.com", token)).token

        with self.assertRaises(TooManyRequestsError):
            await self.service.issue_and_send("busy@example.com", token)
        self.assertEqual(len(self.sender.sent), 5)

    async def test_rate_limited_send_touches_nothing(self):
        service = build_service(
            config=make_config(MAX_REQUESTS=0),
            verification_store=self.store,
            email_sender=self.sender,
        )
        first = await service.issue_and_send("first@example.com")
        with self.assertRaises(TooManyRequestsError):
            await service.issue_and_send("other@example.com", first.token)
        self.assertIsNone(await self.store.find_by_email("other@example.com"))

    async def test_delivery_failure_propagates_after_persisting(self):
        sender = FailingEmailSender()
        service = build_service(verification_store=self.store, email_sender=sender)

        with self.assertRaises(EmailDeliveryError):
            await service.issue_and_send("bounce@example.com")

        self.assertEqual(sender.attempts, 1)
        self.assertIsNotNone(await self.store.find_by_email("bounce@example.com"))

    async def test_missing_key_is_internal_fault(self):
        reporter = RecordingErrorReporter()
        service = build_service(
            config=make_config(CODE_ENCRYPTION_KEY=None),
            verification_store=self.store,
            email_sender=self.sender,
            reporter=reporter,
        )
        with self.assertRaises(CryptoError):
            await service.issue_and_send("nokey@example.com")

        self.assertEqual(len(reporter.captured), 1)
        self.assertEqual(self.store.count(), 0)
        self.assertEqual(self.sender.sent, [])


class TestConfirmCode(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.store = MemoryVerificationStore()
        self.sender = RecordingEmailSender()
        self.clock = FakeClock()
        self.reporter = RecordingErrorReporter()
        self.service = build_service(
            config=make_config(AUTH_CODE_EXPIRATION_MILLIS=180000),
            verification_store=self.store,
            email_sender=self.sender,
            reporter=self.reporter,
            clock=self.clock,
        )
        await self.service.issue_and_send("user@example.com")
        self.code = self.sender.last_code()

    async def test_correct_code_confirms(self):
        self.clock.advance(seconds=30)
        self.assertTrue(await self.service.confirm_code("user@example.com", self.code))

        record = await self.store.find_by_email("user@example.com")
        self.assertTrue(record.confirmed)
        self.assertEqual(record.confirmed_at, self.clock.now)

    async def test_unknown_email_returns_false(self):
        self.assertFalse(await self.service.confirm_code("nobody@example.com", self.code))

    async def test_wrong_code_returns_false(self):
        wrong = "100000" if self.code != "100000" else "100001"
        self.assertFalse(await self.service.confirm_code("user@example.com", wrong))
        record = await self.store.find_by_email("user@example.com")
        self.assertFalse(record.confirmed)

    async def test_code_valid_at_window_edge(self):
        self.clock.advance(milliseconds=180000)
        self.assertTrue(await self.service.confirm_code("user@example.com", self.code))

    async def test_expired_code_returns_false_and_keeps_record(self):
        self.clock.advance(milliseconds=180001)
        self.assertFalse(await self.service.confirm_code("user@example.com", self.code))

        record = await self.store.find_by_email("user@example.com")
        self.assertIsNotNone(record)
        self.assertFalse(record.confirmed)

    async def test_expiry_runs_from_issue_not_confirmation(self):
        self.assertTrue(await self.service.confirm_code("user@example.com", self.code))
        self.clock.advance(minutes=4)
        self.assertFalse(await self.service.confirm_code("user@example.com", self.code))

    async def test_reconfirmation_allowed_by_default(self):
        self.assertTrue(await self.service.confirm_code("user@example.com", self.code))
        self.assertTrue(await self.service.confirm_code("user@example.com", self.code))

    async def test_reconfirmation_can_be_rejected(self):
        service = build_service(
            config=make_config(ALLOW_RECONFIRMATION=False),
            verification_store=self.store,
            clock=self.clock,
        )
        self.assertTrue(await service.confirm_code("user@example.com", self.code))
        self.assertFalse(await service.confirm_code("user@example.com", self.code))

    async def test_corrupt_ciphertext_is_fatal(self):
        record = await self.store.find_by_email("user@example.com")
        await self.store.save(replace(record, encrypted_code="corrupted"))

        with self.assertRaises(CryptoError):
            await self.service.confirm_code("user@example.com", self.code)
        self.assertEqual(len(self.reporter.captured), 1)

        record = await self.store.find_by_email("user@example.com")
        self.assertFalse(record.confirmed)


class TestVerifyVariants(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.users = MemoryUserStore()
        await self.users.add_user("Member@Example.com")
        self.sender = RecordingEmailSender()
        self.service = build_service(user_store=self.users, email_sender=self.sender)

    async def test_signup_rejects_existing_account(self):
        await self.service.issue_and_send("member@example.com")
        with self.assertRaises(DuplicateEmailError) as ctx:
            await self.service.verify_for_signup("member@example.com", self.sender.last_code())
        self.assertEqual(ctx.exception.status_code, 409)

    async def test_signup_confirms_new_email(self):
        await self.service.issue_and_send("fresh@example.com")
        code = self.sender.last_code()
        self.assertTrue(await self.service.verify_for_signup("fresh@example.com", code))

    async def test_reset_rejects_unknown_account(self):
        await self.service.issue_and_send("stranger@example.com")
        with self.assertRaises(InvalidEmailError) as ctx:
            await self.service.verify_for_reset("stranger@example.com", self.sender.last_code())
        self.assertEqual(ctx.exception.status_code, 404)

    async def test_reset_confirms_existing_account(self):
        await self.service.issue_and_send("member@example.com")
        code = self.sender.last_code()
        self.assertTrue(await self.service.verify_for_reset("member@example.com", code))
        self.assertFalse(await self.service.verify_for_reset("member@example.com", "000000"))


class TestConcurrentRequests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.store = MemoryVerificationStore()
        self.sender = RecordingEmailSender()
        self.service = build_service(
            config=make_config(ALLOW_RECONFIRMATION=False),
            verification_store=self.store,
            email_sender=self.sender,
        )

    async def test_parallel_sends_keep_one_record(self):
        await asyncio.gather(*(self.service.issue_and_send("race@example.com") for _ in range(10)))

        self.assertEqual(self.store.count(), 1)
        self.assertEqual(len(self.sender.sent), 10)

    async def test_parallel_confirms_succeed_once(self):
        await self.service.issue_and_send("race@example.com")
        code = self.sender.last_code()

        results = await asyncio.gather(*(self.service.confirm_code("race@example.com", code) for _ in range(10)))

        self.assertEqual(results.count(True), 1)
        record = await self.store.find_by_email("race@example.com")
        self.assertTrue(record.confirmed)


if __name__ == "__main__":
    unittest.main()
