import logging
from typing import Any

from bhojan.core.errors import Result
from bhojan.core.validation import validate_contact
from bhojan.utils.dispatch import NotificationDispatcher

logger = logging.getLogger(__name__)


class ContactService:
    def __init__(self, notifier, dispatcher: NotificationDispatcher):
        self.notifier = notifier
        self.dispatcher = dispatcher

    def send_contact_message(self, data: Any) -> Result:
        """Validate a contact form and forward it to the restaurant by e-mail"""
        validation = validate_contact(data)
        if not validation.success:
            return validation

        contact = validation.data
        logger.info(f"Contact message received from {contact.name}")
        self.dispatcher.dispatch(self.notifier.send_contact_email, contact)
        return Result.ok()
