from datetime import date

from app.verification.models import VerificationDetails

MAX_NOTES_LENGTH = 1000


def validate_details(details: VerificationDetails, today: date | None = None) -> str | None:
    """Return the first problem with the entered details, or None if they are acceptable."""
    if not details.tree_name.strip():
        return "Tree name is required"
    if details.planting_date > (today or date.today()):
        return "Planting date cannot be in the future"
    if details.notes is not None and len(details.notes) > MAX_NOTES_LENGTH:
        return f"Notes are too long (max {MAX_NOTES_LENGTH} characters)"
    return None
