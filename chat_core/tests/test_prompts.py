from chat_core.prompts import build_conversation_prompt, build_summary_prompt


def test_conversation_prompt_embeds_history_and_last_message():
    history = "[USER] Hi\n[MODEL] Hello!\n[USER] What is 2+2?\n"
    prompt = build_conversation_prompt(history, "What is 2+2?")
    assert history in prompt
    assert "USER'S LAST MESSAGE:\nWhat is 2+2?" in prompt
    assert '{"reply": "..."}' in prompt


def test_summary_prompt_embeds_history_only():
    history = "[USER] Hi\n[MODEL] Hello!\n"
    prompt = build_summary_prompt(history)
    assert history in prompt
    assert "3-6 sentences" in prompt
    assert "USER'S LAST MESSAGE" not in prompt
    assert '{"reply": "..."}' in prompt


def test_prompts_are_deterministic():
    history = "[USER] a\n"
    assert build_conversation_prompt(history, "a") == build_conversation_prompt(history, "a")
    assert build_summary_prompt(history) == build_summary_prompt(history)


def test_prompt_does_not_reinterpret_placeholders_in_history():
    history = "[USER] cost is $last_message and {reply}\n"
    prompt = build_conversation_prompt(history, "next")
    assert "cost is $last_message and {reply}" in prompt
