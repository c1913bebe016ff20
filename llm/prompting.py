from pathlib import Path
from typing import Union

from langchain_core.prompts import PromptTemplate

from util.logging_util import setup_logger

logger = setup_logger(__name__)


def load_template(template_path: Union[str, Path]) -> PromptTemplate:
    """Load a Jinja2 prompt template from disk."""
    with open(template_path, "r") as f:
        template_content = f.read()

    # Create a prompt template that treats the input as a Jinja2 template
    return PromptTemplate.from_template(template_content, template_format="jinja2")


def render_template(template_path: Union[str, Path], params: dict) -> str:
    """
    Renders a Jinja2 template file with the given parameters.

    Args:
        template_path: The path to the Jinja2 template file.
        params: A dictionary of parameters to populate the template.

    Returns:
        The rendered prompt text.
    """
    prompt = load_template(template_path)
    text = prompt.format(**params)
    logger.debug(f"Rendered {template_path} ({len(text)} chars)")
    return text
