"""Prompt templates for multi-step strategies."""

from __future__ import annotations

import re

_PLACEHOLDER = re.compile(r"\{(task|previous_output)\}")

BALANCED_REFINE_PROMPT = """\
Refine and expand this analysis with more detail:

## Original Task
{task}

## Initial Analysis
{previous_output}

## Your Task
Provide a refined, detailed analysis including:
1. A more comprehensive breakdown
2. Code examples where appropriate
3. Best practices
4. Implementation considerations
"""

QUALITY_DETAIL_PROMPT = """\
Provide a comprehensive, detailed analysis:

## Original Task
{task}

## Initial Outline
{previous_output}

## Requirements
1. Detailed architecture and design
2. Multiple code examples
3. Step-by-step implementation guide
4. Error handling and edge cases
5. Testing strategies
6. Best practices and patterns
"""

QUALITY_REFINE_PROMPT = """\
The previous response needs more depth. Enhance it further.

## Original Task
{task}

## Current Response
{previous_output}

## Add
1. More detailed examples
2. Architecture diagrams (ASCII art)
3. Performance considerations
4. Security best practices
5. Deployment strategies
6. A short summary of key takeaways
"""


def render(template: str, *, task: str, previous_output: str) -> str:
    """Embed task and previous output verbatim into a template."""

    values = {"task": task, "previous_output": previous_output}
    return _PLACEHOLDER.sub(lambda match: values[match.group(1)], template)
