from datetime import datetime

from pydantic import BaseModel


# Each list entry carries a category label ("Personal", "Work", "Home", ...)
class EmailEntry(BaseModel):
    option: str
    email: str

class PhoneEntry(BaseModel):
    option: str
    number: str

class AddressEntry(BaseModel):
    option: str
    address: str


def serialize_contact(doc: dict) -> dict:
    """Turn a stored contact document into a JSON-ready dict.

    Keys the document doesn't have stay absent, so a contact created
    without title/company has neither key in the response.
    """
    contact = dict(doc)
    contact["_id"] = str(contact["_id"])
    if isinstance(contact.get("created"), datetime):
        contact["created"] = contact["created"].isoformat()
    return contact
