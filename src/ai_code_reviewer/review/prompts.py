NO_COMMENT = "NO_COMMENT"


SYSTEM_MESSAGE = (
    "You are a senior developer and expert code reviewer. Analyze code changes and provide "
    "feedback in structured JSON format with markdown formatting and appropriate icons for "
    "bugs (⚠️🐞), performance issues (🚀🐢), and best practices (💡✅)."
)


ROLE_DEFAULT = "You are a senior {language_id} developer."

ROLE_STRENGTHENED = (
    "You are a senior {language_id} developer and expert code reviewer. "
    "Follow the output format below exactly."
)


REVIEW_PROMPT = """{role} Your task is to act as a code reviewer of a Pull Request:
- Use bullet points if you have multiple comments.
- If there are any bugs, highlight them with ⚠️ or 🐞.
- If there are major performance problems, highlight them with 🚀 or 🐢.
- Provide details on missed use of best-practices using 💡.
- Do not highlight minor issues, indent issues and nitpicks.
- Provide clear and concise feedback.
- Provide code examples for the issue where possible.
- Only provide instructions for improvements.
- If you have no instructions respond with `{no_comment}` only, otherwise provide your instructions.

You are provided with the code changes (diffs) in a unidiff format.
Write every message in **markdown format in {response_language}**, and use appropriate **icons** for:
- ⚠️ / 🐞 → Bugs
- 🚀 / 🐢 → Major performance issues
- 💡 / ✅ → Suggestions, best practice improvements

Use severity "error" for bugs, "warning" for performance problems and risky code, "info" for suggestions.
{extra_block}
Code changes:
```diff
{diff_text}
```

Provide your feedback in this JSON format:
{{
  "comments": [
    {{
      "message": "Comment text in markdown format with appropriate icons",
      "line": <line number in the new file, starting at 1>,
      "severity": "error|warning|info",
      "category": "category (optional)"
    }}
  ]
}}

Only provide JSON response, do not add any other explanations. If there are no issues, respond with `{no_comment}` or return an empty comments array.
Evaluate in terms of code quality, security, performance, and best practices.
"""


STRENGTHENED_REMINDER = (
    "Reminder: your entire answer must be either the JSON object above or the single word "
    f"`{NO_COMMENT}`. Escape double quotes inside messages as \\\".\n"
)


def build_review_prompt(
    diff_text: str,
    language_id: str,
    *,
    strengthened: bool = False,
    response_language: str = "English",
    extra_instructions: str = "",
) -> str:
    """Build the review prompt for a diff.

    The strengthened variant only adds role emphasis and a closing reminder;
    both variants ask for the same JSON contract and accept ``NO_COMMENT``.
    """
    role_template = ROLE_STRENGTHENED if strengthened else ROLE_DEFAULT

    extra_block = ""
    if extra_instructions and extra_instructions.strip():
        extra_block = f"\nAdditional instructions:\n{extra_instructions.strip()}\n"

    prompt = REVIEW_PROMPT.format(
        role=role_template.format(language_id=language_id),
        no_comment=NO_COMMENT,
        response_language=response_language,
        extra_block=extra_block,
        diff_text=diff_text,
    )

    if strengthened:
        prompt += STRENGTHENED_REMINDER

    return prompt


def prompt_variables() -> dict:
    """JSON format example and instruction list, for hosts that show the prompt rules."""
    return {
        "json_format": {
            "comments": [
                {
                    "message": "Comment text",
                    "line": "line_number",
                    "severity": "error|warning|info",
                    "category": "category (optional)",
                }
            ]
        },
        "instructions": [
            "Only provide JSON response, do not add any other explanations.",
            f"If there are no issues, respond with {NO_COMMENT} or return an empty comments array.",
            "Evaluate in terms of code quality, security, performance, and best practices.",
            "Use ⚠️🐞 for bugs, 🚀🐢 for performance issues, 💡✅ for best practices.",
            "Do not highlight minor issues, indent issues and nitpicks.",
            "Provide clear and concise feedback with code examples where possible.",
        ],
    }
