"""End-to-end engine behaviour with a scripted model and a fake ads API."""

from __future__ import annotations

import asyncio

import pytest

from adchat.domain.errors import PendingActionConflict
from adchat.domain.models import (
    AssistantMessage,
    PendingAction,
    ThreadState,
    ToolMessage,
    UserMessage,
)
from adchat.engine.events import TextDelta, ThreadAssigned, TurnComplete, TurnFailed
from adchat.engine.resume import CANCELLED_REPLY, NOT_SAVED_REPLY
from adchat.engine.runner import (
    EMPTY_RESPONSE_FALLBACK,
    ChatEngine,
    DirectReply,
    StreamedTurn,
)

from conftest import ScriptedModel, call, text

SUMMER_SALE = {
    "name": "Summer Sale",
    "objective": "OUTCOME_SALES",
    "dailyBudget": 5000,
}


async def drain(result) -> list:
    assert isinstance(result, StreamedTurn)
    return [event async for event in result.events]


def streamed_text(events: list) -> str:
    return "".join(e.text for e in events if isinstance(e, TextDelta))


def fail_saves(store, *outcomes: bool) -> None:
    """Make the next saves fail where ``outcomes`` is true, then recover."""
    real_save = store.save
    pending = list(outcomes)

    async def save(state):
        if pending and pending.pop(0):
            raise RuntimeError("store down")
        await real_save(state)

    store.save = save


async def start_summer_sale(engine, model, account):
    model.script([text("Sure! "), call("create_campaign", **SUMMER_SALE)])
    result = await engine.handle(
        "Create a campaign called Summer Sale with $50 daily budget",
        thread_id=None,
        account=account,
    )
    events = await drain(result)
    return result.thread_id, events


class TestStreamedTurn:
    @pytest.mark.asyncio
    async def test_plain_answer_streams_and_persists(self, engine, model, store, account):
        model.script([text("You have "), text("3 campaigns.")])

        result = await engine.handle("How many campaigns?", thread_id=None, account=account)
        events = await drain(result)

        assert events[0] == ThreadAssigned(result.thread_id)
        assert isinstance(events[-1], TurnComplete)
        assert streamed_text(events) == "You have 3 campaigns."

        state = await store.load(result.thread_id)
        assert state.messages == [
            UserMessage("How many campaigns?"),
            AssistantMessage("You have 3 campaigns."),
        ]
        assert state.user_id == "user-1"
        assert state.ad_account_id == "act_123"

    @pytest.mark.asyncio
    async def test_system_prompt_added_when_history_has_none(self, engine, model, account):
        model.script([text("Hi.")])
        await drain(await engine.handle("What's up?", thread_id=None, account=account))

        invocation = model.invocations[0]
        assert "act_123" in invocation.system_instruction
        assert invocation.messages == [UserMessage("What's up?")]

    @pytest.mark.asyncio
    async def test_read_tool_loop(self, engine, model, ads, store, account):
        ads.responses[("GET", "/act_123/campaigns")] = {
            "data": [{"id": "1", "name": "Spring"}]
        }
        model.script(
            [call("get_campaigns", call_id="c1")],
            [text("You have one campaign: Spring.")],
        )

        result = await engine.handle("Show my campaigns", thread_id=None, account=account)
        events = await drain(result)

        assert streamed_text(events) == "You have one campaign: Spring."
        assert ads.calls[0][:2] == ("GET", "/act_123/campaigns")

        state = await store.load(result.thread_id)
        tool_message = state.messages[2]
        assert isinstance(tool_message, ToolMessage)
        assert tool_message.tool_call_id == "c1"
        assert '"Spring"' in tool_message.content
        assert not tool_message.is_error
        # The second call sees the tool result in its history.
        assert model.invocations[1].messages[-1] == tool_message

    @pytest.mark.asyncio
    async def test_tool_results_keep_request_order(self, engine, model, ads, store, account):
        model.script(
            [
                call("get_campaign", call_id="a", campaignId="1"),
                call("get_campaign", call_id="b", campaignId="2"),
            ],
            [text("Done.")],
        )
        result = await engine.handle("Compare 1 and 2", thread_id=None, account=account)
        await drain(result)

        state = await store.load(result.thread_id)
        tool_ids = [m.tool_call_id for m in state.messages if isinstance(m, ToolMessage)]
        assert tool_ids == ["a", "b"]
        assert [c[1] for c in ads.calls] == ["/1", "/2"]

    @pytest.mark.asyncio
    async def test_tool_failure_becomes_error_result(self, engine, model, ads, store, account):
        ads.errors[("GET", "/act_123/campaigns")] = "Invalid OAuth access token."
        model.script([call("get_campaigns")], [text("I couldn't reach your account.")])

        result = await engine.handle("Show my campaigns", thread_id=None, account=account)
        events = await drain(result)

        assert isinstance(events[-1], TurnComplete)
        state = await store.load(result.thread_id)
        tool_message = state.messages[2]
        assert tool_message.is_error
        assert "Invalid OAuth access token." in tool_message.content

    @pytest.mark.asyncio
    async def test_unknown_tool_becomes_error_result(self, engine, model, store, account):
        model.script([call("launch_rocket")], [text("Sorry.")])
        result = await engine.handle("Go", thread_id=None, account=account)
        await drain(result)

        state = await store.load(result.thread_id)
        assert state.messages[2].content == "Error: Unknown tool 'launch_rocket'"

    @pytest.mark.asyncio
    async def test_model_error_is_reported_as_message(self, engine, model, store, account):
        model.script(RuntimeError("quota exceeded"))

        result = await engine.handle("Hi there, how are we doing?", thread_id=None, account=account)
        events = await drain(result)

        assert isinstance(events[-1], TurnComplete)
        assert streamed_text(events) == "Sorry, I had trouble processing that: quota exceeded"
        state = await store.load(result.thread_id)
        assert state.messages[-1] == AssistantMessage(
            "Sorry, I had trouble processing that: quota exceeded"
        )

    @pytest.mark.asyncio
    async def test_model_timeout_is_reported_as_message(self, engine, model, settings, account):
        settings.model_timeout_seconds = 0.05

        class SlowModel(ScriptedModel):
            async def stream(self, **kwargs):
                await asyncio.sleep(1)
                yield text("too late")

        engine.model = SlowModel()
        result = await engine.handle("Anything", thread_id=None, account=account)
        events = await drain(result)

        assert streamed_text(events).startswith("Sorry, I had trouble processing that")
        assert isinstance(events[-1], TurnComplete)

    @pytest.mark.asyncio
    async def test_slow_consumer_does_not_count_against_model_timeout(
        self, engine, model, settings, store, account
    ):
        settings.model_timeout_seconds = 0.2
        model.script([text("one "), text("two "), text("three")])

        result = await engine.handle("Count slowly", thread_id=None, account=account)
        events = []
        async for event in result.events:
            events.append(event)
            if isinstance(event, TextDelta):
                await asyncio.sleep(0.15)

        assert streamed_text(events) == "one two three"
        assert isinstance(events[-1], TurnComplete)
        state = await store.load(result.thread_id)
        assert state.messages[-1] == AssistantMessage("one two three")

    @pytest.mark.asyncio
    async def test_empty_response_fallback(self, engine, model, store, account):
        model.script([])
        result = await engine.handle("Hmm", thread_id=None, account=account)
        events = await drain(result)

        assert streamed_text(events) == EMPTY_RESPONSE_FALLBACK
        state = await store.load(result.thread_id)
        assert state.messages[-1] == AssistantMessage(EMPTY_RESPONSE_FALLBACK)

    @pytest.mark.asyncio
    async def test_hop_limit_stops_tool_loop(self, engine, model, settings, store, account):
        model.script(*[[call("get_ad_accounts", call_id=f"c{i}")] for i in range(10)])

        result = await engine.handle("Loop", thread_id=None, account=account)
        events = await drain(result)

        assert len(model.invocations) == settings.max_tool_hops
        assert "stopped after" in streamed_text(events)
        assert isinstance(events[-1], TurnComplete)

    @pytest.mark.asyncio
    async def test_quick_reply_skips_model(self, engine, model, store, account):
        result = await engine.handle("  Hello ", thread_id=None, account=account)
        events = await drain(result)

        assert model.invocations == []
        assert "How can I help" in streamed_text(events)
        state = await store.load(result.thread_id)
        assert [m.role for m in state.messages] == ["user", "assistant"]

    @pytest.mark.asyncio
    async def test_history_is_prefix_of_next_turn(self, engine, model, store, account):
        model.script([text("First answer.")])
        first = await engine.handle("First question", thread_id=None, account=account)
        await drain(first)
        before = list((await store.load(first.thread_id)).messages)

        model.script([text("Second answer.")])
        second = await engine.handle(
            "Second question", thread_id=first.thread_id, account=account
        )
        await drain(second)

        after = (await store.load(first.thread_id)).messages
        assert second.thread_id == first.thread_id
        assert after[: len(before)] == before
        assert model.invocations[1].messages[: len(before)] == before

    @pytest.mark.asyncio
    async def test_failed_save_ends_with_error_event(self, engine, model, store, account):
        async def broken_save(state):
            raise OSError("disk full")

        store.save = broken_save
        model.script([text("ok")])
        events = await drain(await engine.handle("Hi engine", thread_id=None, account=account))

        assert isinstance(events[-1], TurnFailed)
        assert "disk full" in events[-1].message
        assert not any(isinstance(e, TurnComplete) for e in events)

    @pytest.mark.asyncio
    async def test_slow_state_load_starts_fresh(self, engine, model, store, account):
        async def slow_load(thread_id):
            await asyncio.sleep(1)

        store.load = slow_load
        model.script([text("Fresh start.")])

        result = await engine.handle("Hello again?", thread_id="t-slow", account=account)
        events = await drain(result)

        assert result.thread_id == "t-slow"
        assert model.invocations[0].messages == [UserMessage("Hello again?")]
        assert isinstance(events[-1], TurnComplete)


class TestConfirmationFlow:
    @pytest.mark.asyncio
    async def test_dangerous_call_requests_confirmation(self, engine, model, ads, store, account):
        thread_id, events = await start_summer_sale(engine, model, account)

        assert ads.calls == []
        body = streamed_text(events)
        assert "Summer Sale" in body
        assert "$50" in body
        assert isinstance(events[-1], TurnComplete)

        state = await store.load(thread_id)
        pending = state.pending_action
        assert pending.tool_name == "create_campaign"
        assert pending.arguments == {**SUMMER_SALE, "status": "PAUSED"}
        assert state.messages[-1].content.endswith("Say **yes** to confirm or **no** to cancel.")

    @pytest.mark.asyncio
    async def test_dangerous_call_history_pairs_every_call(self, engine, model, store, account):
        model.script(
            [
                call("get_campaigns", call_id="read"),
                call("delete_campaign", call_id="del", campaignId="42"),
            ]
        )
        result = await engine.handle("Delete campaign 42", thread_id=None, account=account)
        await drain(result)

        state = await store.load(result.thread_id)
        assistant, *tool_messages, confirmation = state.messages[1:]
        assert [c.id for c in assistant.tool_calls] == ["read", "del"]
        assert [m.tool_call_id for m in tool_messages] == ["read", "del"]
        assert tool_messages[0].is_error
        assert tool_messages[1].content == "Awaiting user confirmation."
        assert "delete this campaign" in confirmation.content
        assert state.pending_action.tool_call_id == "del"

    @pytest.mark.asyncio
    async def test_yes_executes_stored_arguments(self, engine, model, ads, store, account):
        ads.responses[("POST", "/act_123/campaigns")] = {"id": "999"}
        thread_id, _ = await start_summer_sale(engine, model, account)

        reply = await engine.handle("yes", thread_id=thread_id, account=account)

        assert isinstance(reply, DirectReply)
        assert reply.content.startswith("✅ **Action completed!**")
        assert '"999"' in reply.content
        assert ads.writes == [
            (
                "POST",
                "/act_123/campaigns",
                {
                    "name": "Summer Sale",
                    "objective": "OUTCOME_SALES",
                    "status": "PAUSED",
                    "daily_budget": 5000,
                    "special_ad_categories": [],
                },
            )
        ]
        assert len(model.invocations) == 1

        state = await store.load(thread_id)
        assert state.pending_action is None
        assert state.messages[-2] == UserMessage("yes")
        assert state.messages[-1] == AssistantMessage(reply.content)

    @pytest.mark.asyncio
    async def test_yes_is_case_insensitive(self, engine, model, ads, account):
        thread_id, _ = await start_summer_sale(engine, model, account)
        reply = await engine.handle("  YES ", thread_id=thread_id, account=account)
        assert reply.content.startswith("✅ **Action completed!**")
        assert len(ads.writes) == 1

    @pytest.mark.asyncio
    async def test_no_cancels(self, engine, model, ads, store, account):
        thread_id, _ = await start_summer_sale(engine, model, account)

        reply = await engine.handle("no", thread_id=thread_id, account=account)

        assert isinstance(reply, DirectReply)
        assert reply.content == CANCELLED_REPLY
        assert ads.calls == []
        assert (await store.load(thread_id)).pending_action is None

    @pytest.mark.asyncio
    async def test_anything_but_yes_cancels(self, engine, model, ads, account):
        thread_id, _ = await start_summer_sale(engine, model, account)
        reply = await engine.handle("yes please", thread_id=thread_id, account=account)
        assert reply.content == CANCELLED_REPLY
        assert ads.writes == []

    @pytest.mark.asyncio
    async def test_failed_action_reports_and_clears(self, engine, model, ads, store, account):
        ads.errors[("POST", "/act_123/campaigns")] = "Budget too low"
        thread_id, _ = await start_summer_sale(engine, model, account)

        reply = await engine.handle("yes", thread_id=thread_id, account=account)

        assert reply.content == "❌ **Action failed:**\n\nBudget too low"
        assert (await store.load(thread_id)).pending_action is None

    @pytest.mark.asyncio
    async def test_confirmation_not_saved_runs_nothing(self, engine, model, ads, store, account):
        thread_id, _ = await start_summer_sale(engine, model, account)
        fail_saves(store, True, True)

        reply = await engine.handle("yes", thread_id=thread_id, account=account)

        assert isinstance(reply, DirectReply)
        assert reply.content == NOT_SAVED_REPLY
        assert ads.writes == []

        # The stored thread still awaits the answer; the next "yes" writes once.
        reply = await engine.handle("yes", thread_id=thread_id, account=account)
        assert reply.content.startswith("✅ **Action completed!**")
        assert len(ads.writes) == 1
        assert (await store.load(thread_id)).pending_action is None

    @pytest.mark.asyncio
    async def test_failed_save_after_write_does_not_repeat_it(
        self, engine, model, ads, store, account
    ):
        thread_id, _ = await start_summer_sale(engine, model, account)
        fail_saves(store, False, True)

        reply = await engine.handle("yes", thread_id=thread_id, account=account)

        assert reply.content.startswith("✅ **Action completed!**")
        assert len(ads.writes) == 1
        state = await store.load(thread_id)
        assert state.pending_action is None
        assert state.messages[-1] == UserMessage("yes")

        model.script([text("It is already done.")])
        result = await engine.handle("yes", thread_id=thread_id, account=account)
        assert isinstance(result, StreamedTurn)
        await drain(result)
        assert len(ads.writes) == 1

    @pytest.mark.asyncio
    async def test_unregistered_pending_tool(self, engine, store, account):
        state = ThreadState(thread_id="t1", user_id="user-1", ad_account_id="act_123")
        state.set_pending(
            PendingAction(
                tool_name="create_campaign_v2",
                tool_call_id="c1",
                arguments={},
                original_message=AssistantMessage(),
            )
        )
        await store.save(state)

        reply = await engine.handle("yes", thread_id="t1", account=account)

        assert reply.content == '❌ Error: Tool "create_campaign_v2" not found.'
        assert (await store.load("t1")).pending_action is None

    @pytest.mark.asyncio
    async def test_quick_reply_does_not_bypass_pending(self, engine, model, ads, account):
        thread_id, _ = await start_summer_sale(engine, model, account)
        reply = await engine.handle("hello", thread_id=thread_id, account=account)
        assert reply.content == CANCELLED_REPLY

    @pytest.mark.asyncio
    async def test_conversation_continues_after_confirmation(self, engine, model, store, account):
        thread_id, _ = await start_summer_sale(engine, model, account)
        await engine.handle("yes", thread_id=thread_id, account=account)

        model.script([text("Anything else?")])
        events = await drain(await engine.handle("Thanks", thread_id=thread_id, account=account))

        assert streamed_text(events) == "Anything else?"
        history = model.invocations[-1].messages
        assert history[-1] == UserMessage("Thanks")
        assert isinstance(history[-2], AssistantMessage)
        assert history[-2].content.startswith("✅ **Action completed!**")

    @pytest.mark.asyncio
    async def test_invalid_dangerous_arguments_are_sent_back(self, engine, model, store, account):
        model.script(
            [call("create_campaign", name="No goal")],
            [text("Which objective should it have?")],
        )
        result = await engine.handle("Create a campaign", thread_id=None, account=account)
        events = await drain(result)

        state = await store.load(result.thread_id)
        assert state.pending_action is None
        assert state.messages[2].is_error
        assert "objective" in state.messages[2].content
        assert streamed_text(events) == "Which objective should it have?"

    @pytest.mark.asyncio
    async def test_invalid_dangerous_call_runs_nothing_else(
        self, engine, model, ads, store, account
    ):
        model.script(
            [
                call("get_campaigns", "c1"),
                call("create_campaign", "c2", name="No goal"),
            ],
            [text("Which objective should it have?")],
        )
        result = await engine.handle(
            "List campaigns and create one", thread_id=None, account=account
        )
        events = await drain(result)

        assert ads.calls == []
        assert not any(isinstance(e, TurnFailed) for e in events)
        assert streamed_text(events) == "Which objective should it have?"

        state = await store.load(result.thread_id)
        assert state.pending_action is None
        results = [m for m in state.messages if isinstance(m, ToolMessage)]
        assert [m.tool_call_id for m in results] == ["c1", "c2"]
        assert all(m.is_error for m in results)
        assert results[0].content.startswith("Not executed: create_campaign")
        assert "objective" in results[1].content
        # The follow-up model call sees both results.
        assert model.invocations[-1].messages[-2:] == results

    def test_second_pending_action_conflicts(self):
        state = ThreadState(thread_id="t1")
        action = PendingAction(
            tool_name="delete_ad",
            tool_call_id="c1",
            arguments={"adId": "1"},
            original_message=AssistantMessage(),
        )
        state.set_pending(action)
        with pytest.raises(PendingActionConflict):
            state.set_pending(action)


class TestThreadManagement:
    @pytest.mark.asyncio
    async def test_account_context_is_fixed_per_thread(self, engine, model, store, ads, account):
        model.script([text("one")])
        first = await engine.handle("First message", thread_id=None, account=account)
        await drain(first)

        other = type(account)(user_id="user-1", ad_account_id="act_999", ads=ads)
        model.script([text("two")])
        await drain(await engine.handle("Second message", thread_id=first.thread_id, account=other))

        assert (await store.load(first.thread_id)).ad_account_id == "act_123"

    @pytest.mark.asyncio
    async def test_clear_thread(self, engine, model, store, account):
        model.script([text("ok")])
        result = await engine.handle("Remember this", thread_id=None, account=account)
        await drain(result)

        assert await engine.clear_thread(result.thread_id) is True
        assert await store.load(result.thread_id) is None
        assert await engine.clear_thread(result.thread_id) is False

    def test_core_binding(self, engine: ChatEngine):
        declared = {d.name for d in engine.binding.declarations}
        assert "get_campaigns" in engine.binding.executable
        assert "search_interests" not in engine.binding.executable
        assert "create_campaign" in declared
        assert "create_campaign" not in engine.binding.executable
