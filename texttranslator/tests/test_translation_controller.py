from __future__ import annotations

import asyncio
import logging
import unittest

from texttranslator.app.history.ledger import HistoryLedger
from texttranslator.app.languages.catalog import LanguageCatalog
from texttranslator.app.translation.controller import (
    EMPTY_INPUT_MESSAGE,
    EMPTY_RESPONSE_MESSAGE,
    NETWORK_FAILURE_MESSAGE,
    TranslationAlreadyPendingError,
    TranslationConfigurationError,
    TranslationRequestController,
    TranslationValidationError,
)
from texttranslator.app.translation.providers.base import (
    TranslationProvider,
    TranslationProviderError,
)
from texttranslator.app.translation.types import (
    ControllerState,
    TranslationPayload,
    TranslationRequest,
)
from texttranslator.tests.support import FixedClock, make_settings


class _ScriptedProvider(TranslationProvider):
    def __init__(self, *steps: object, configured: bool = True) -> None:
        self._steps = list(steps)
        self._configured = configured
        self.requests: list[TranslationRequest] = []

    @property
    def name(self) -> str:
        return "scripted-provider"

    @property
    def configured(self) -> bool:
        return self._configured

    async def translate(self, request: TranslationRequest) -> TranslationPayload:
        self.requests.append(request)
        step = self._steps.pop(0)
        if isinstance(step, Exception):
            raise step
        return TranslationPayload(translated_text=str(step))


class _GatedProvider(TranslationProvider):
    def __init__(self) -> None:
        self.release = asyncio.Event()
        self.calls = 0

    @property
    def name(self) -> str:
        return "gated-provider"

    async def translate(self, request: TranslationRequest) -> TranslationPayload:
        self.calls += 1
        await self.release.wait()
        return TranslationPayload(translated_text=f"<{request.text}>")


def _controller(
    provider: TranslationProvider,
) -> tuple[TranslationRequestController, HistoryLedger]:
    ledger = HistoryLedger(clock=FixedClock())
    controller = TranslationRequestController(
        settings=make_settings(),
        logger=logging.getLogger("texttranslator.test.controller"),
        ledger=ledger,
        catalog=LanguageCatalog(),
        provider_override=provider,
    )
    return controller, ledger


class TranslationControllerSuccessTest(unittest.IsolatedAsyncioTestCase):
    async def test_success_appends_to_ledger_and_returns_to_idle(self) -> None:
        provider = _ScriptedProvider("Bonjour")
        controller, ledger = _controller(provider)

        outcome = await controller.translate("Hello", "fr")

        self.assertTrue(outcome.ok)
        self.assertEqual(outcome.translated_text, "Bonjour")
        self.assertIs(controller.state, ControllerState.IDLE)
        self.assertEqual(len(ledger), 1)
        record = ledger.records()[0]
        self.assertEqual(record, outcome.record)
        self.assertEqual(record.input_text, "Hello")
        self.assertEqual(record.target_language_code, "fr")
        self.assertEqual(record.target_language_name, "French")
        self.assertEqual(provider.requests, [TranslationRequest(text="Hello", target_language_code="fr")])

        snapshot = controller.snapshot()
        self.assertEqual(snapshot["translated_text"], "Bonjour")
        self.assertEqual(snapshot["requests_succeeded"], 1)
        self.assertIsNone(snapshot["error"])

    async def test_uses_selected_language_when_none_given(self) -> None:
        provider = _ScriptedProvider("Hola")
        controller, ledger = _controller(provider)
        controller.select_language("es")

        await controller.translate("Hello")

        self.assertEqual(provider.requests[0].target_language_code, "es")
        self.assertEqual(ledger.records()[0].target_language_name, "Spanish")

    async def test_original_untrimmed_input_is_recorded(self) -> None:
        controller, ledger = _controller(_ScriptedProvider("Bonjour"))
        await controller.translate("  Hello \n", "fr")
        self.assertEqual(ledger.records()[0].input_text, "  Hello \n")


class TranslationControllerFailureTest(unittest.IsolatedAsyncioTestCase):
    async def test_transport_error_leaves_ledger_untouched(self) -> None:
        provider = _ScriptedProvider(TranslationProviderError("network", "rapidapi_request_error:boom"))
        controller, ledger = _controller(provider)

        outcome = await controller.translate("Hello", "fr")

        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.error, NETWORK_FAILURE_MESSAGE)
        self.assertEqual(outcome.error_kind, "network")
        self.assertIsNone(outcome.record)
        self.assertEqual(len(ledger), 0)
        self.assertIs(controller.state, ControllerState.IDLE)
        self.assertEqual(controller.error, NETWORK_FAILURE_MESSAGE)

    async def test_status_and_empty_response_errors(self) -> None:
        provider = _ScriptedProvider(
            TranslationProviderError("status", "rapidapi_status_error:500"),
            TranslationProviderError("empty_response", "rapidapi_empty_text_response"),
        )
        controller, ledger = _controller(provider)

        status_outcome = await controller.translate("Hello", "fr")
        self.assertIn("500", status_outcome.error or "")

        empty_outcome = await controller.translate("Hello", "fr")
        self.assertEqual(empty_outcome.error, EMPTY_RESPONSE_MESSAGE)

        self.assertEqual(len(ledger), 0)
        self.assertEqual(controller.snapshot()["requests_failed"], 2)

    async def test_no_retry_after_failure(self) -> None:
        provider = _ScriptedProvider(
            TranslationProviderError("network", "down"),
            "Bonjour",
        )
        controller, ledger = _controller(provider)

        await controller.translate("Hello", "fr")
        self.assertEqual(len(provider.requests), 1)

        outcome = await controller.translate("Hello", "fr")
        self.assertTrue(outcome.ok)
        self.assertIsNone(controller.error)
        self.assertEqual(len(ledger), 1)

    async def test_blank_input_is_rejected_without_a_request(self) -> None:
        provider = _ScriptedProvider()
        controller, ledger = _controller(provider)

        for text in ("", "   ", "\n\t"):
            with self.assertRaises(TranslationValidationError):
                await controller.translate(text, "fr")

        self.assertEqual(provider.requests, [])
        self.assertEqual(len(ledger), 0)
        self.assertEqual(controller.error, EMPTY_INPUT_MESSAGE)
        self.assertIs(controller.state, ControllerState.IDLE)

    async def test_unknown_language_is_rejected(self) -> None:
        provider = _ScriptedProvider()
        controller, _ = _controller(provider)
        with self.assertRaises(TranslationValidationError):
            await controller.translate("Hello", "xx-unknown")
        self.assertEqual(provider.requests, [])

    async def test_unconfigured_provider_is_rejected_without_a_request(self) -> None:
        provider = _ScriptedProvider(configured=False)
        controller, ledger = _controller(provider)

        with self.assertRaises(TranslationConfigurationError):
            await controller.translate("Hello", "fr")

        self.assertEqual(provider.requests, [])
        self.assertEqual(len(ledger), 0)
        self.assertIsNotNone(controller.error)


class TranslationControllerConcurrencyTest(unittest.IsolatedAsyncioTestCase):
    async def test_second_request_while_pending_is_not_issued(self) -> None:
        provider = _GatedProvider()
        controller, ledger = _controller(provider)

        first = asyncio.create_task(controller.translate("Hello", "fr"))
        await asyncio.sleep(0)
        self.assertIs(controller.state, ControllerState.PENDING)

        with self.assertRaises(TranslationAlreadyPendingError):
            await controller.translate("Other", "fr")

        provider.release.set()
        outcome = await first

        self.assertTrue(outcome.ok)
        self.assertEqual(provider.calls, 1)
        self.assertEqual(len(ledger), 1)
        self.assertIs(controller.state, ControllerState.IDLE)
        self.assertEqual(controller.snapshot()["requests_rejected"], 1)

    async def test_entering_pending_clears_previous_error(self) -> None:
        provider = _GatedProvider()
        controller, _ = _controller(provider)
        with self.assertRaises(TranslationValidationError):
            await controller.translate(" ", "fr")
        self.assertIsNotNone(controller.error)

        task = asyncio.create_task(controller.translate("Hello", "fr"))
        await asyncio.sleep(0)
        self.assertIsNone(controller.error)
        provider.release.set()
        await task


class TranslationControllerWorkspaceTest(unittest.IsolatedAsyncioTestCase):
    async def test_reuse_loads_record_into_workspace(self) -> None:
        controller, ledger = _controller(_ScriptedProvider("Hola"))
        outcome = await controller.translate("Hello", "es")
        controller.select_language("fr")
        controller.clear_input()
        assert outcome.record is not None

        record = controller.reuse(outcome.record.id)

        self.assertEqual(record, outcome.record)
        snapshot = controller.snapshot()
        self.assertEqual(snapshot["input_text"], "Hello")
        self.assertEqual(snapshot["translated_text"], "Hola")
        self.assertEqual(snapshot["selected_language"], "es")
        self.assertIsNone(snapshot["error"])
        self.assertEqual(len(ledger), 1)

    async def test_reuse_of_missing_record(self) -> None:
        controller, _ = _controller(_ScriptedProvider())
        self.assertIsNone(controller.reuse(42))

    def test_select_unknown_language(self) -> None:
        controller, _ = _controller(_ScriptedProvider())
        with self.assertRaises(TranslationValidationError):
            controller.select_language("zz")
        self.assertEqual(controller.selected_language, "fr")


if __name__ == "__main__":
    unittest.main()
