"""
Prompt builder.

Pure string assembly; no network. build_prompt() returns the user prompt
(what the client sends as `content`) and the structured system directive the
backend places in the system message.
"""

from __future__ import annotations
from dataclasses import dataclass

from service.text_utils import count_words

EMAIL = "email"
GENERIC = "generic"

WORD_RULES = """I will count words by splitting on spaces. Each space-separated token is ONE word:
- "Hello world" = 2 words
- "state-of-the-art" = 1 word
- "don't" = 1 word
- "AI" = 1 word
- "2024" = 1 word"""

USER_TEMPLATE = """CRITICAL REQUIREMENT: Generate EXACTLY {target} words.

{word_rules}

Current text ({current} words):
{content}

Your task: {action} this text to EXACTLY {target} words while maintaining:
- The core message and meaning
- A {tone} tone
- Natural flow and readability

{format_rule}

VERIFICATION PROCESS:
1. Write your response
2. Count words by splitting on spaces
3. Adjust until you have EXACTLY {target} words
4. Double-check your count before submitting

The exact word count ({target}) is the most critical requirement."""

SYSTEM_TEMPLATE = """You are a writing assistant that rewrites text to an exact length.

CRITICAL INSTRUCTIONS:
1. Your output MUST contain exactly {target} words and MUST NOT exceed {target} words
2. These each count as ONE word: "Hello-world", "AI", "don't", "2024", "a"
3. {subject_rule}
4. Keep the meaning of the original; do not add facts

Your task: Rewrite the following {input_type} in {tone} tone, aiming for {target} words.

Format your response as:
{layout}"""


@dataclass(frozen=True)
class Prompt:
    user: str
    system: str
    action: str
    target_words: int


def is_email(input_type: str) -> bool:
    return (input_type or "").strip().lower() == EMAIL


def action_for(current_words: int, target_words: int) -> str:
    return "expand" if target_words > current_words else "shorten"


def build_system_directive(tone: str, target_words: int, input_type: str) -> str:
    if is_email(input_type):
        subject_rule = 'Start with a "Subject:" line; it is NOT counted in the word limit'
        layout = "Subject: [Your subject]\n\n[Your content]"
    else:
        subject_rule = 'Do not add a "Subject:" line or any heading'
        layout = "[Your content]"
    return SYSTEM_TEMPLATE.format(
        target=target_words,
        subject_rule=subject_rule,
        input_type=(input_type or GENERIC),
        tone=tone,
        layout=layout,
    )


def build_prompt(content: str, tone: str, target_words: int, input_type: str) -> Prompt:
    current = count_words(content)
    action = action_for(current, target_words)
    if is_email(input_type):
        format_rule = "This is an email: include a Subject line (not counted in the word limit)."
    else:
        format_rule = "Do not include a Subject line."
    user = USER_TEMPLATE.format(
        target=target_words,
        word_rules=WORD_RULES,
        current=current,
        content=content,
        action=action,
        tone=tone,
        format_rule=format_rule,
    )
    return Prompt(
        user=user,
        system=build_system_directive(tone, target_words, input_type),
        action=action,
        target_words=target_words,
    )
