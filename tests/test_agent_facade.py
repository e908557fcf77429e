"""Tests for AiAgent: validation, safe results and fan-out isolation."""

import pytest

from aistudy.agent.facade import AiAgent
from aistudy.agent.prompts import DEFAULT_SYSTEM_PROMPT, SYNTHESIS_PROMPT
from aistudy.agent.structs import Persona, PersonaReply, Result, StructuredReply, Turn
from aistudy.config.keys import StaticApiKeyProvider
from aistudy.exceptions import (
    ErrorKind,
    InvalidArgumentError,
    NotConfiguredError,
    ProviderApiError,
    ProviderTimeoutError,
)

from .conftest import FakeTransport, reply_json

PERSONAS = [
    Persona("Alpha", "You are Alpha."),
    Persona("Beta", "You are Beta."),
    Persona("Gamma", "You are Gamma."),
]


class TestSingleTurn:
    @pytest.mark.asyncio
    async def test_ask_safe_returns_structured_reply(self, agent, transport):
        transport.push(reply_json("X is ..."))

        result = await agent.ask_safe("What is X?")

        assert result.ok
        assert result.value.agent_message == "X is ..."
        assert result.value.usage.total_tokens == 15

    @pytest.mark.asyncio
    async def test_system_prompt_is_prepended(self, agent, transport):
        transport.push(reply_json("ok"))
        await agent.ask("hello")

        messages = transport.calls[0]["messages"]
        assert messages[0] == {"role": "system", "content": DEFAULT_SYSTEM_PROMPT}
        assert messages[1] == {"role": "user", "content": "hello"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("question", ["", "   "])
    async def test_blank_question_never_reaches_transport(self, agent, transport, question):
        result = await agent.ask_safe(question)

        assert result.kind is ErrorKind.INVALID_ARGUMENT
        assert transport.calls == []

    @pytest.mark.asyncio
    async def test_malformed_reply_is_reported_as_such(self, agent, transport):
        transport.push("not json")
        result = await agent.ask_safe("What is X?")
        assert result.kind is ErrorKind.MALFORMED_RESPONSE

    @pytest.mark.asyncio
    async def test_transport_error_is_returned_not_raised(self, agent, transport):
        transport.push(ProviderApiError("API error: 500 Internal Server Error", status_code=500))
        result = await agent.ask_with_history_safe([Turn.user("A")])
        assert result.kind is ErrorKind.API_ERROR
        assert "500" in result.error.message

    @pytest.mark.asyncio
    async def test_plain_variant_raises(self, agent, transport):
        transport.push(ProviderTimeoutError("slow"))
        with pytest.raises(ProviderTimeoutError):
            await agent.ask_with_history([Turn.user("A")])

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_wrapped(self, agent, transport):
        transport.push(RuntimeError("boom"))
        result = await agent.ask_safe("hi")
        assert not result.ok
        assert isinstance(result.error.original_error, RuntimeError)

    @pytest.mark.asyncio
    async def test_not_configured_without_key(self, settings):
        transport = FakeTransport()
        agent = AiAgent(settings, transport, StaticApiKeyProvider(""))

        assert not agent.is_configured()
        result = await agent.ask_safe("hi")
        assert result.kind is ErrorKind.NOT_CONFIGURED
        assert transport.calls == []

        with pytest.raises(NotConfiguredError):
            await agent.ask("hi")

    @pytest.mark.asyncio
    async def test_empty_history_is_invalid(self, agent):
        with pytest.raises(InvalidArgumentError):
            await agent.ask_with_history([])

    @pytest.mark.asyncio
    async def test_close_releases_transport(self, agent, transport):
        await agent.close()
        assert transport.closed


class TestTemperatures:
    @pytest.mark.asyncio
    async def test_temperature_is_forwarded(self, agent, transport):
        transport.push(reply_json("cold"))
        await agent.ask_with_temperature([Turn.user("A")], 0.0)
        assert transport.calls[0]["temperature"] == 0.0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("temperature", [-0.1, 2.1])
    async def test_out_of_range_temperature_is_invalid(self, agent, transport, temperature):
        result = await agent.ask_with_temperature_safe([Turn.user("A")], temperature)
        assert result.kind is ErrorKind.INVALID_ARGUMENT
        assert transport.calls == []

    @pytest.mark.asyncio
    async def test_fan_out_isolates_failures(self, agent, transport):
        transport.push(reply_json("cold"), ProviderTimeoutError("slow"), reply_json("hot"))
        seen = []

        async def on_reply(reply):
            seen.append(reply.temperature)

        replies = await agent.ask_at_temperatures(
            [Turn.user("A")], [0.0, 0.7, 1.0], on_reply=on_reply
        )

        assert [r.temperature for r in replies] == [0.0, 0.7, 1.0]
        assert [r.result.ok for r in replies] == [True, False, True]
        assert replies[1].result.kind is ErrorKind.TIMEOUT
        assert seen == [0.0, 0.7, 1.0]
        assert [c["temperature"] for c in transport.calls] == [0.0, 0.7, 1.0]

    @pytest.mark.asyncio
    async def test_fan_out_needs_temperatures(self, agent):
        with pytest.raises(InvalidArgumentError):
            await agent.ask_at_temperatures([Turn.user("A")], [])


class TestPersonas:
    @pytest.mark.asyncio
    async def test_custom_prompt_replaces_system_prompt(self, agent, transport):
        transport.push(reply_json("ok"))
        await agent.ask_with_custom_prompt([Turn.user("A")], "Be terse.")
        assert transport.calls[0]["messages"][0]["content"] == "Be terse."

    @pytest.mark.asyncio
    async def test_blank_custom_prompt_is_invalid(self, agent):
        result = await agent.ask_with_custom_prompt_safe([Turn.user("A")], "  ")
        assert result.kind is ErrorKind.INVALID_ARGUMENT

    @pytest.mark.asyncio
    async def test_one_failing_persona_does_not_stop_the_others(self, agent, transport):
        transport.push(
            reply_json("alpha says"),
            ProviderApiError("API error: 500 Internal Server Error", status_code=500),
            reply_json("gamma says"),
            reply_json("consolidated"),
        )

        replies = await agent.consult_multiple([Turn.user("Q?")], PERSONAS)

        assert [r.persona.name for r in replies] == ["Alpha", "Beta", "Gamma"]
        assert [r.result.ok for r in replies] == [True, False, True]
        assert replies[1].result.kind is ErrorKind.API_ERROR
        assert [c["messages"][0]["content"] for c in transport.calls] == [
            p.prompt for p in PERSONAS
        ]

        synthesis = await agent.synthesize_safe([Turn.user("Q?")], replies)

        assert synthesis.ok
        assert synthesis.value.agent_message == "consolidated"
        request = transport.calls[-1]["messages"]
        assert request[0]["content"] == SYNTHESIS_PROMPT
        assert "[Alpha]\nalpha says" in request[1]["content"]
        assert "[Gamma]\ngamma says" in request[1]["content"]
        assert "Beta" not in request[1]["content"]
        assert "Q?" in request[1]["content"]

    @pytest.mark.asyncio
    async def test_consult_needs_personas(self, agent):
        with pytest.raises(InvalidArgumentError):
            await agent.consult_multiple([Turn.user("Q?")], [])

    @pytest.mark.asyncio
    async def test_synthesis_needs_a_success(self, agent, transport):
        failed = [
            PersonaReply(PERSONAS[0], Result.failure(ProviderTimeoutError("slow"))),
        ]
        result = await agent.synthesize_safe([Turn.user("Q?")], failed)
        assert result.kind is ErrorKind.INVALID_ARGUMENT
        assert transport.calls == []

    @pytest.mark.asyncio
    async def test_synthesis_needs_a_user_question(self, agent):
        ok = [PersonaReply(PERSONAS[0], Result.success(StructuredReply(agent_message="x")))]
        with pytest.raises(InvalidArgumentError):
            await agent.synthesize([Turn.assistant("orphan")], ok)


class TestSummarize:
    @pytest.mark.asyncio
    async def test_summarize_returns_reply_text(self, agent, transport):
        transport.push(reply_json("short version"))
        summary = await agent.summarize([Turn.user("long story"), Turn.user("summarize")])
        assert summary == "short version"
