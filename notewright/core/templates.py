import yaml
import logging
from pathlib import Path
from typing import Tuple, Dict, Any, Optional

logger = logging.getLogger("Notewright.Templates")

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"

def load_template(template_name: str, group: Optional[str] = None) -> Tuple[Optional[str], Optional[Path]]:
    """
    Finds and reads a template file.
    Looks for notewright/templates/{group}/{template_name}.j2
    or notewright/templates/{template_name}.j2

    Returns:
        Tuple[str, Path]: The content of the template and its path, or (None, None) if not found.
    """
    candidates = []
    if group:
        candidates.append(TEMPLATES_DIR / group / f"{template_name}.j2")
    candidates.append(TEMPLATES_DIR / f"{template_name}.j2")

    for template_path in candidates:
        if template_path.exists():
            with open(template_path, "r", encoding="utf-8") as f:
                return f.read(), template_path

    return None, None

def parse_template(content: str) -> Tuple[Dict[str, Any], str]:
    """
    Parses a template string with optional YAML Front Matter.

    Format:
    ---
    key: value
    ---
    Template body...

    Returns:
        Tuple[Dict, str]: A tuple containing the metadata dict and the template body.
    """
    if not content.startswith("---"):
        return {}, content

    parts = content.split("---", 2)
    if len(parts) < 3:
        return {}, content

    try:
        metadata = yaml.safe_load(parts[1])
    except yaml.YAMLError as e:
        logger.warning(f"Failed to parse Front Matter: {e}")
        return {}, content

    body = parts[2]
    if body.startswith("\n"):
        body = body[1:]

    return metadata or {}, body
