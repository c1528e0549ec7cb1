from __future__ import annotations

import html

from aiogram import Router, types
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext

from giftdraw.bot.utils import (
    GENERIC_ERROR,
    ensure_organizer,
    load_roster,
    log_handler_exception,
    parse_positions,
    save_roster,
)
from giftdraw.services.roster import Roster, RosterError

router = Router()


def format_roster(roster: Roster) -> str:
    participants = roster.participants
    if not participants:
        return "The list is empty. Use /add <name> to add participants."

    names = {p.id: p.name for p in participants}
    title = html.escape(roster.list_name) if roster.list_name else "Participants"
    lines = [f"{title} ({len(participants)}/{roster.capacity}):"]
    for position, participant in enumerate(participants, start=1):
        lines.append(f"{position}. {html.escape(participant.name)}")

    restrictions = roster.restrictions
    if restrictions:
        lines.append("")
        lines.append("Restrictions:")
        for restriction in restrictions:
            blocked = ", ".join(html.escape(names[r]) for r in restriction.cannot_give_to)
            lines.append(f"{html.escape(names[restriction.participant_id])} cannot give to {blocked}")
    return "\n".join(lines)


@router.message(Command("new"))
async def new_list_handler(message: types.Message, state: FSMContext) -> None:
    if not await ensure_organizer(message, "new"):
        return

    parts = message.text.split(maxsplit=1)
    roster = await load_roster(state)
    roster.clear()
    roster.list_name = parts[1].strip() if len(parts) > 1 else None
    await save_roster(state, roster)
    await message.answer(
        f"Started a new list. Add exactly {roster.capacity} participants with /add <name>."
    )


@router.message(Command("add"))
async def add_participant_handler(message: types.Message, state: FSMContext) -> None:
    if not await ensure_organizer(message, "add"):
        return

    parts = message.text.split(maxsplit=1)
    if len(parts) < 2:
        await message.answer("Usage: /add <name>")
        return

    try:
        roster = await load_roster(state)
        participant = roster.add_participant(parts[1])
        await save_roster(state, roster)
        await message.answer(
            f"Added {html.escape(participant.name)} "
            f"({len(roster.participants)}/{roster.capacity})."
        )
    except RosterError as exc:
        await message.answer(str(exc))
    except Exception as exc:
        log_handler_exception("add", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)


@router.message(Command("remove"))
async def remove_participant_handler(message: types.Message, state: FSMContext) -> None:
    if not await ensure_organizer(message, "remove"):
        return

    try:
        positions = parse_positions(message.text)
    except ValueError:
        positions = []
    if len(positions) != 1:
        await message.answer("Usage: /remove <number>, as shown by /participants")
        return

    try:
        roster = await load_roster(state)
        participant = roster.participant_at(positions[0])
        roster.remove_participant(participant.id)
        await save_roster(state, roster)
        await message.answer(f"Removed {html.escape(participant.name)}.")
    except RosterError as exc:
        await message.answer(str(exc))
    except Exception as exc:
        log_handler_exception("remove", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)


@router.message(Command("participants"))
async def participants_handler(message: types.Message, state: FSMContext) -> None:
    if not await ensure_organizer(message, "participants"):
        return

    roster = await load_roster(state)
    await message.answer(format_roster(roster))


@router.message(Command("restrict"))
async def restrict_handler(message: types.Message, state: FSMContext) -> None:
    if not await ensure_organizer(message, "restrict"):
        return

    try:
        positions = parse_positions(message.text)
    except ValueError:
        positions = []
    if len(positions) < 2:
        await message.answer(
            "Usage: /restrict <giver> <receiver> [receiver ...]\n"
            "Numbers come from /participants. A new restriction replaces the old one "
            "for the same giver."
        )
        return

    try:
        roster = await load_roster(state)
        giver = roster.participant_at(positions[0])
        receivers = [roster.participant_at(position) for position in positions[1:]]
        roster.set_restriction(giver.id, [receiver.id for receiver in receivers])
        await save_roster(state, roster)
        blocked = ", ".join(html.escape(r.name) for r in receivers if r.id != giver.id)
        await message.answer(f"{html.escape(giver.name)} cannot give to {blocked}.")
    except RosterError as exc:
        await message.answer(str(exc))
    except Exception as exc:
        log_handler_exception("restrict", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)


@router.message(Command("unrestrict"))
async def unrestrict_handler(message: types.Message, state: FSMContext) -> None:
    if not await ensure_organizer(message, "unrestrict"):
        return

    try:
        positions = parse_positions(message.text)
    except ValueError:
        positions = []
    if len(positions) != 1:
        await message.answer("Usage: /unrestrict <giver>")
        return

    try:
        roster = await load_roster(state)
        giver = roster.participant_at(positions[0])
        if roster.remove_restriction(giver.id):
            await save_roster(state, roster)
            await message.answer(f"Restriction for {html.escape(giver.name)} removed.")
        else:
            await message.answer(f"{html.escape(giver.name)} has no restriction.")
    except RosterError as exc:
        await message.answer(str(exc))
    except Exception as exc:
        log_handler_exception("unrestrict", message.from_user.id, message.chat.id, exc)
        await message.answer(GENERIC_ERROR)
