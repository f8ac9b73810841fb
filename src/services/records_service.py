"""
Records service - seed data, update filtering and creation notifications
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from models.email import EmailResult, EmailType
from models.record import Answer
from services.email_service import NotificationGateway

logger = logging.getLogger(__name__)

NOTIFICATION_SUBJECT = "Data Retrieved From Simulator"

ANSWERS_GREETING = (
    "📋 Bonjour SCB Cameroun, J'ai rempli les questionnaires du simulateur "
    "et voici *Mes réponses au questionnaire* : <br /> <ul>"
)
ANSWERS_SIGN_OFF = "<br /> </ul> J'aimerais en savoir plus s'il vous plait"

SAMPLE_RECORDS: List[Dict[str, Any]] = [
    {"name": "John Doe", "email": "john@example.com", "age": 30},
    {"name": "Jane Smith", "email": "jane@example.com", "age": 25},
    {"name": "Bob Johnson", "email": "bob@example.com", "age": 35},
]


def _is_missing(value: Any) -> bool:
    """None, False, 0 and "" count as missing; empty lists and objects do not"""
    if value is None or value is False or value == "":
        return True
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value == 0


def _as_answer(entry: Any) -> Optional[Answer]:
    if isinstance(entry, Answer):
        return entry
    if isinstance(entry, Mapping):
        return Answer.model_validate(dict(entry))
    return None


def format_answers(answers: Iterable[Any]) -> str:
    """
    Render questionnaire answers as an HTML message body

    Entries that are not label/value objects, or whose label or value is
    missing, are skipped; list values are joined with ", ".
    """
    message = ANSWERS_GREETING

    for entry in answers:
        answer = _as_answer(entry)
        if answer is None or _is_missing(answer.label) or _is_missing(answer.value):
            continue
        value = answer.value
        if isinstance(value, list):
            value = ", ".join(str(item) for item in value)
        message += f'<li> <span style="font-weight: bold"> {answer.label} </span>  :  <i> {value} </i> </li>  <br />'

    message += ANSWERS_SIGN_OFF
    return message


def build_update_fields(
    name: Optional[str] = None,
    email: Optional[str] = None,
    age: Optional[int] = None
) -> Dict[str, Any]:
    """Keep only truthy fields; age 0 and empty strings are dropped"""
    updates: Dict[str, Any] = {}
    if name:
        updates["name"] = name
    if email:
        updates["email"] = email
    if age:
        updates["age"] = int(age)
    return updates


async def notify_record_created(
    gateway: NotificationGateway,
    recipient: Optional[str],
    answers: List[Any]
) -> Optional[EmailResult]:
    """Best-effort creation notification; never raises"""
    if not gateway.is_ready():
        logger.info("Skipping creation notification: email service not ready")
        return None
    if not recipient:
        logger.warning("Skipping creation notification: RECIPIENT_EMAIL not set")
        return None

    try:
        result = await gateway.send_email(
            recipient,
            EmailType.CUSTOM.value,
            {"subject": NOTIFICATION_SUBJECT, "message": format_answers(answers)}
        )
    except Exception as e:
        logger.error(f"Creation notification failed: {e}")
        return None

    if not result.success:
        logger.warning(f"Creation notification not sent: {result.error}")
    return result
