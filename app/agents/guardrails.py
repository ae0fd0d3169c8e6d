"""
Output guardrails for agent messages.

A moderation guardrail sends the agent's finished message to a small classifier
model and trips when the category is anything other than NONE. Classifier failures
(transport errors, timeouts, unparseable output) fail open by default: the outcome
is not tripped but is flagged as errored and logged at WARNING, so it can always be
told apart from a genuine NONE verdict.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Set

from app.config.constants import (
    DEFAULT_GUARDRAIL_COMPANY_NAME,
    GUARDRAIL_FAIL_OPEN,
    GUARDRAIL_MODEL,
    GUARDRAIL_TIMEOUT,
    LOGGER_NAME,
)
from app.errors import TransportError
from app.models.guardrail_schemas import GuardrailOutcome, GuardrailOutput, ModerationCategory
from app.services.openai_client import extract_output_text

logger = logging.getLogger(LOGGER_NAME)

OUTPUT_CLASSES = {
    ModerationCategory.OFFENSIVE: "Content that includes hate speech, discriminatory language, insults, slurs, or harassment.",
    ModerationCategory.OFF_BRAND: "Content that discusses competitors in a disparaging way.",
    ModerationCategory.VIOLENCE: "Content that includes explicit threats, incitement of harm, or graphic descriptions of physical injury or violence.",
    ModerationCategory.NONE: "If no other classes are appropriate and the message is fine.",
}

GUARDRAIL_OUTPUT_SCHEMA = {
    "type": "object",
    "properties": {
        "moderationRationale": {"type": "string"},
        "moderationCategory": {
            "type": "string",
            "enum": [category.value for category in ModerationCategory],
        },
    },
    "required": ["moderationRationale", "moderationCategory"],
    "additionalProperties": False,
}


def build_classifier_prompt(message: str, company_name: str) -> str:
    classes = "\n".join(f"- {category.value}: {text}" for category, text in OUTPUT_CLASSES.items())
    return (
        "You are an expert at classifying text according to moderation policies. "
        "Consider the provided message, analyze potential classes from output_classes, "
        "and output the best classification. Output json, following the provided schema. "
        "Keep your analysis and reasoning short and to the point, maximum 2 sentences.\n\n"
        f"<info>\n- Company name: {company_name}\n</info>\n\n"
        f"<message>\n{message}\n</message>\n\n"
        f"<output_classes>\n{classes}\n</output_classes>\n"
    )


async def run_guardrail_classifier(
    client: Any,
    message: str,
    company_name: str = DEFAULT_GUARDRAIL_COMPANY_NAME,
    model: str = GUARDRAIL_MODEL,
) -> GuardrailOutput:
    """
    Classify one message.

    Raises:
        TransportError: If the Responses API call fails
        ValueError: If the classifier output does not match GuardrailOutput
    """
    body = {
        "model": model,
        "input": [{"role": "user", "content": build_classifier_prompt(message, company_name)}],
        "text": {
            "format": {
                "type": "json_schema",
                "name": "output_format",
                "schema": GUARDRAIL_OUTPUT_SCHEMA,
                "strict": True,
            }
        },
    }
    response = await client.create_response(body)

    parsed = response.get("output_parsed")
    if parsed is not None:
        output = GuardrailOutput.model_validate(parsed)
    else:
        output = GuardrailOutput.model_validate_json(extract_output_text(response.get("output") or []))
    output.test_text = message
    return output


def extract_moderation(output_info: Any) -> Optional[Dict[str, Any]]:
    """Find the classifier verdict inside a guardrail outcome, however deeply nested."""
    if not isinstance(output_info, dict):
        return None
    if "moderationCategory" in output_info:
        return output_info
    for key in ("outputInfo", "output_info", "output", "result"):
        found = extract_moderation(output_info.get(key))
        if found is not None:
            return found
    return None


class ModerationGuardrail:
    """Moderation guardrail bound to one company name."""

    name = "moderation_guardrail"

    def __init__(
        self,
        client: Any,
        company_name: str = DEFAULT_GUARDRAIL_COMPANY_NAME,
        model: str = GUARDRAIL_MODEL,
        timeout: float = GUARDRAIL_TIMEOUT,
        fail_open: bool = GUARDRAIL_FAIL_OPEN,
    ):
        self.client = client
        self.company_name = company_name
        self.model = model
        self.timeout = timeout
        self.fail_open = fail_open

    async def execute(self, agent_output: str) -> GuardrailOutcome:
        try:
            result = await asyncio.wait_for(
                run_guardrail_classifier(self.client, agent_output, self.company_name, self.model),
                self.timeout,
            )
        except (TransportError, ValueError, asyncio.TimeoutError) as e:
            logger.warning(
                f"Guardrail classifier failed ({type(e).__name__}: {e}); "
                f"failing {'open' if self.fail_open else 'closed'}"
            )
            return GuardrailOutcome(
                tripwire_triggered=not self.fail_open,
                output_info={"error": "guardrail_failed"},
                errored=True,
            )

        output_info = result.model_dump(mode="json", by_alias=True)
        if result.moderation_category == ModerationCategory.NONE:
            logger.debug("Guardrail classified message as NONE")
            return GuardrailOutcome(tripwire_triggered=False, output_info=output_info)

        logger.info(f"Guardrail tripped: {result.moderation_category.value} - {result.moderation_rationale}")
        return GuardrailOutcome(tripwire_triggered=True, output_info=output_info)


class GuardrailPipeline:
    """
    Runs the output guardrails for a session's assistant messages.

    Each message id is classified at most once.
    """

    def __init__(self, guardrails: List[ModerationGuardrail]):
        self.guardrails = guardrails
        self._submitted: Set[str] = set()

    def claim(self, item_id: str) -> bool:
        """Reserve a message for classification; False if it was already claimed."""
        if item_id in self._submitted:
            return False
        self._submitted.add(item_id)
        return True

    async def classify(self, text: str) -> GuardrailOutcome:
        """Run guardrails in order and stop at the first that trips."""
        outcome = GuardrailOutcome(tripwire_triggered=False)
        for guardrail in self.guardrails:
            outcome = await guardrail.execute(text)
            if outcome.tripwire_triggered:
                break
        return outcome
