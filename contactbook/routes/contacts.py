import logging
from datetime import datetime, timezone

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError
from starlette.concurrency import run_in_threadpool

from contactbook.db.mongo import contacts_collection
from contactbook.models.contact import serialize_contact
from contactbook.utils.errors import (
    contact_not_found,
    internal_error,
    invalid_id,
    malformed_field,
    store_error,
)
from contactbook.utils.form_fields import FieldDecodeError, parse_contact_form
from contactbook.utils.uploads import get_avatar_file

logger = logging.getLogger(__name__)

router = APIRouter()


def _object_id(contact_id: str):
    try:
        return ObjectId(contact_id)
    except (InvalidId, TypeError):
        return None


async def _store_avatar(request: Request, form):
    upload = get_avatar_file(form)
    if upload is None:
        return None
    return await run_in_threadpool(request.app.state.avatar_store.save, upload)


async def _discard_avatar(request: Request, filename):
    if filename:
        await run_in_threadpool(request.app.state.avatar_store.discard, filename)


# ✅ Create a contact
@router.post("")
async def create_contact(request: Request, contacts=Depends(contacts_collection)):
    form = await request.form()
    try:
        fields = parse_contact_form(form)
    except FieldDecodeError as e:
        return malformed_field(e)

    contact = {"favorite": False, **fields}

    try:
        avatar = await _store_avatar(request, form)
    except OSError:
        logger.exception("Could not store avatar upload")
        return internal_error("Could not store avatar")
    if avatar:
        contact["avatar"] = avatar
    contact["created"] = datetime.now(timezone.utc)

    try:
        result = await contacts.insert_one(contact)
    except PyMongoError:
        logger.exception("Insert of new contact failed")
        await _discard_avatar(request, avatar)
        return internal_error("Could not save contact")

    logger.info("Created contact %s", result.inserted_id)
    return Response(status_code=200)


# ✅ List all contacts, newest first
@router.get("")
async def list_contacts(contacts=Depends(contacts_collection)):
    try:
        docs = await contacts.find({}, sort=[("created", -1)]).to_list(length=None)
    except PyMongoError:
        logger.exception("Listing contacts failed")
        return Response(status_code=404)

    # Existing clients expect "no contacts" to come back as a 404
    if not docs:
        return Response(status_code=404)

    return JSONResponse(content=[serialize_contact(doc) for doc in docs])


# ✅ Get one contact
@router.get("/{contact_id}")
async def get_contact(contact_id: str, contacts=Depends(contacts_collection)):
    object_id = _object_id(contact_id)
    if object_id is None:
        return invalid_id(contact_id)

    try:
        doc = await contacts.find_one({"_id": object_id})
    except PyMongoError:
        logger.exception("Lookup of contact %s failed", contact_id)
        return store_error()

    if doc is None:
        return contact_not_found(contact_id)
    return JSONResponse(content=serialize_contact(doc))


# ✅ Update a contact (PUT and PATCH behave the same)
@router.api_route("/{contact_id}", methods=["PUT", "PATCH"])
async def update_contact(contact_id: str, request: Request, contacts=Depends(contacts_collection)):
    object_id = _object_id(contact_id)
    if object_id is None:
        return invalid_id(contact_id)

    form = await request.form()
    try:
        changes = parse_contact_form(form)
    except FieldDecodeError as e:
        return malformed_field(e)

    try:
        existing = await contacts.find_one({"_id": object_id}, {"avatar": 1})
    except PyMongoError:
        logger.exception("Lookup of contact %s failed", contact_id)
        return store_error()
    if existing is None:
        return contact_not_found(contact_id)

    try:
        avatar = await _store_avatar(request, form)
    except OSError:
        logger.exception("Could not store avatar upload")
        return internal_error("Could not store avatar")
    if avatar:
        changes["avatar"] = avatar

    # Merge by field: anything not in `changes` (favorite, created, ...) keeps its stored value.
    # No version check, so two concurrent updates of one contact can overwrite each other.
    try:
        updated = await contacts.find_one_and_update(
            {"_id": object_id},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
    except PyMongoError:
        logger.exception("Update of contact %s failed", contact_id)
        await _discard_avatar(request, avatar)
        return store_error("Could not update contact")

    if updated is None:
        # Deleted between the lookup and the write
        await _discard_avatar(request, avatar)
        return contact_not_found(contact_id)

    if avatar:
        await _discard_avatar(request, existing.get("avatar"))

    logger.info("Updated contact %s (%s)", contact_id, ", ".join(sorted(changes)))
    return JSONResponse(content=serialize_contact(updated))


# ✅ Delete a contact
@router.delete("/{contact_id}")
async def delete_contact(contact_id: str, request: Request, contacts=Depends(contacts_collection)):
    object_id = _object_id(contact_id)
    if object_id is None:
        return invalid_id(contact_id)

    try:
        deleted = await contacts.find_one_and_delete({"_id": object_id})
    except PyMongoError:
        logger.exception("Delete of contact %s failed", contact_id)
        return store_error("Could not delete contact")

    if deleted is None:
        return contact_not_found(contact_id)

    await _discard_avatar(request, deleted.get("avatar"))
    logger.info("Deleted contact %s", contact_id)
    return Response(status_code=200)
