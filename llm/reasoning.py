"""
Splitting an LLM's raw output into a reasoning block and the user facing answer.

Some models prefix their answer with their chain of thought wrapped in
<think>, <scratchpad> or <rationale> tags. Every provider adapter runs its raw
text through the same ReasoningExtractor, so the behaviour is identical no
matter which provider produced the text.
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional, Pattern, Tuple, Union

DEFAULT_REASONING_PATTERN = re.compile(
    r"^\s*<(think|scratchpad|rationale)>(.*?)</\1>\s*(.*)",
    re.IGNORECASE | re.DOTALL,
)

# (reasoning, main_response, raw_content, json_mode) -> (reasoning, main_response)
PostProcessor = Callable[[Optional[str], str, str, bool], Tuple[Optional[str], str]]


def keep_parts(reasoning: Optional[str], main_response: str, raw_content: str,
               json_mode: bool) -> Tuple[Optional[str], str]:
    """Default post-processor: leaves the extracted parts untouched."""
    return reasoning, main_response


@dataclass
class ReasoningExtractor:
    """Applies a reasoning pattern and a post-processor to raw LLM text.

    The pattern must expose three groups: the tag name, the reasoning and the
    main response. Passing pattern=None disables extraction entirely.
    """
    pattern: Optional[Union[str, Pattern]] = DEFAULT_REASONING_PATTERN
    post_processor: PostProcessor = keep_parts

    def __post_init__(self):
        if isinstance(self.pattern, str):
            self.pattern = re.compile(self.pattern, re.IGNORECASE | re.DOTALL)

    def extract(self, raw_content: str, json_mode: bool = False) -> Tuple[Optional[str], str]:
        """
        Split raw content into (reasoning, main_response).

        Args:
            raw_content: The text the provider returned.
            json_mode: Whether the request was made in JSON mode.

        Returns:
            (reasoning, main_response). reasoning is None when no block matched,
            in which case main_response is the raw content unchanged.
        """
        reasoning = None
        main_response = raw_content

        if self.pattern is not None:
            match = self.pattern.match(raw_content)
            if match and len(match.groups()) == 3:
                reasoning = match.group(2).strip()
                main_response = match.group(3).strip()

        reasoning, processed = self.post_processor(reasoning, main_response, raw_content, json_mode)
        if processed is None:
            processed = raw_content
        return reasoning, processed
