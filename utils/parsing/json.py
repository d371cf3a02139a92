import json
import logging
import re
import json5
import demjson3

logger = logging.getLogger(__name__)


def extract_json_block(response_text: str) -> str:
    """
    Strip markdown fences and surrounding prose from an LLM response,
    leaving the outermost {...} block.
    """
    text = (response_text or "").strip()

    # Remove markdown code blocks if present
    if text.startswith("```json"):
        text = text.replace("```json", "").replace("```", "").strip()
    elif text.startswith("```"):
        text = text.replace("```", "").strip()

    # Extract JSON from response if it's wrapped in text
    if not text.startswith("{"):
        start_idx = text.find("{")
        end_idx = text.rfind("}")
        if start_idx != -1 and end_idx != -1:
            text = text[start_idx : end_idx + 1]

    return text


# JSON Repair and Parsing Function
def repair_and_parse_json(response_text: str) -> dict:
    """
    Multi-layered JSON parsing with auto-repair capabilities.

    Attempts to parse JSON through multiple strategies:
    1. Standard json.loads()
    2. Clean common issues (trailing commas, comments)
    3. json5 parser (tolerates comments and trailing commas)
    4. demjson3 parser (auto-repairs many errors)

    Args:
        response_text: Raw text response from Claude

    Returns:
        Parsed JSON object

    Raises:
        ValueError: If all parsing attempts fail or the top level is not an object
    """
    text = extract_json_block(response_text)
    errors = []
    result = None

    # Layer 1: Try standard JSON parser first
    try:
        result = json.loads(text)
    except json.JSONDecodeError as e:
        errors.append(f"Standard JSON: {str(e)}")
        logger.debug(f"❌ Layer 1 failed: {str(e)}")

    # Layer 2: Clean common Claude JSON mistakes
    if result is None:
        cleaned = text

        # Remove trailing commas before closing braces/brackets
        cleaned = re.sub(r",(\s*[}\]])", r"\1", cleaned)

        # Remove single-line comments (// ...)
        cleaned = re.sub(r"//.*?\n", "\n", cleaned)

        # Remove multi-line comments (/* ... */)
        cleaned = re.sub(r"/\*.*?\*/", "", cleaned, flags=re.DOTALL)

        try:
            result = json.loads(cleaned)
            logger.debug("✅ Layer 2: Cleaned JSON parsing succeeded")
        except json.JSONDecodeError as e:
            errors.append(f"Cleaned JSON: {str(e)}")
            logger.debug(f"❌ Layer 2 failed: {str(e)}")

    # Layer 3: Try json5 (tolerates trailing commas and comments)
    if result is None:
        try:
            result = json5.loads(text)
            logger.debug("✅ Layer 3: JSON5 parsing succeeded")
        except Exception as e:
            errors.append(f"JSON5: {str(e)}")
            logger.debug(f"❌ Layer 3 failed: {str(e)}")

    # Layer 4: Try demjson3 (auto-repairs many JSON errors)
    if result is None:
        try:
            result = demjson3.decode(text)
            logger.debug("✅ Layer 4: DemJSON parsing succeeded")
        except Exception as e:
            errors.append(f"DemJSON: {str(e)}")
            logger.debug(f"❌ Layer 4 failed: {str(e)}")

    if result is None:
        logger.warning(f"❌ JSON parsing failed. Response preview: {text[:200]}...")
        raise ValueError(
            f"Failed to parse JSON after all attempts. "
            f"Errors: {'; '.join(errors[:2])}"
        )

    if not isinstance(result, dict):
        raise ValueError(f"Expected a JSON object, got {type(result).__name__}")

    return result
