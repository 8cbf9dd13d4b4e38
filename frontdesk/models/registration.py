"""
Guest registration form as an immutable state machine.

Every edit to the form is an action passed through ``reduce``, which returns a
new ``RegistrationState``. The progress score and the submit gate are pure
functions of that state. The identity of the primary guest is one of three
variants, and ID-proof validation is dispatched on the variant:

    new                   -> ID proof required
    returning_verified    -> ID proof waived, stored images are reused
    returning_unverified  -> ID proof required
"""
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from frontdesk.config.settings import settings
from frontdesk.models.guest import GuestLookupResult, IdProofType

# Progress weights. The ID-proof share adds up to 55 in both branches so a
# complete form scores 100.
NAME_WEIGHT = 20
PHONE_WEIGHT = 10
DEPARTURE_WEIGHT = 15
ID_TYPE_WEIGHT = 15
ID_FRONT_WEIGHT = 20
ID_BACK_WEIGHT = 20
ID_WAIVED_WEIGHT = ID_TYPE_WEIGHT + ID_FRONT_WEIGHT + ID_BACK_WEIGHT

class NewGuest(BaseModel):
    kind: Literal["new"] = "new"

    class Config:
        frozen = True

class ReturningVerifiedGuest(BaseModel):
    kind: Literal["returning_verified"] = "returning_verified"
    guest_id: Optional[str] = None
    id_proof_type: Optional[IdProofType] = None
    id_front_image: Optional[str] = None
    id_back_image: Optional[str] = None

    class Config:
        frozen = True

class ReturningUnverifiedGuest(BaseModel):
    kind: Literal["returning_unverified"] = "returning_unverified"
    guest_id: Optional[str] = None

    class Config:
        frozen = True

GuestIdentity = Annotated[
    Union[NewGuest, ReturningVerifiedGuest, ReturningUnverifiedGuest],
    Field(discriminator="kind"),
]

class GuestDraft(BaseModel):
    full_name: Optional[str] = ""
    phone: Optional[str] = ""
    email: Optional[str] = ""
    address: Optional[str] = ""
    is_primary: bool = False
    id_proof_type: Optional[IdProofType] = None
    id_proof_number: Optional[str] = ""
    id_front_image: Optional[str] = None
    id_back_image: Optional[str] = None

    class Config:
        frozen = True

class RegistrationState(BaseModel):
    room_id: str
    base_price: float = 0
    ac_charge: float = 0
    geyser_charge: float = 0
    has_ac: bool = False
    has_geyser: bool = False
    expected_checkout: Optional[datetime] = None
    advance_paid: float = 0
    notes: str = ""
    guests: Tuple[GuestDraft, ...] = (GuestDraft(is_primary=True),)
    identity: GuestIdentity = NewGuest()

    class Config:
        frozen = True

    @property
    def primary(self) -> GuestDraft:
        for guest in self.guests:
            if guest.is_primary:
                return guest
        return self.guests[0]

    @property
    def tariff(self) -> float:
        return compute_tariff(self.base_price, self.ac_charge, self.geyser_charge, self.has_ac, self.has_geyser)

def compute_tariff(base_price: float, ac_charge: float, geyser_charge: float, has_ac: bool, has_geyser: bool) -> float:
    """Per-night tariff: base plus the surcharges that are switched on"""
    return float(base_price) + (float(ac_charge) if has_ac else 0.0) + (float(geyser_charge) if has_geyser else 0.0)

def identity_from_lookup(lookup: Optional[GuestLookupResult]) -> GuestIdentity:
    if lookup is None or not lookup.guest_exists:
        return NewGuest()
    if lookup.id_verified:
        return ReturningVerifiedGuest(
            guest_id=lookup.guest_id,
            id_proof_type=lookup.id_proof_type,
            id_front_image=lookup.id_front_image,
            id_back_image=lookup.id_back_image,
        )
    return ReturningUnverifiedGuest(guest_id=lookup.guest_id)

def id_proof_waived(identity: GuestIdentity) -> bool:
    return isinstance(identity, ReturningVerifiedGuest)

def has_complete_id_proof(guest: Any) -> bool:
    """Front image, back image and ID type all present"""
    return bool(guest.id_front_image) and bool(guest.id_back_image) and bool(guest.id_proof_type)

def satisfies_id_gate(guest: Any, identity: GuestIdentity) -> bool:
    """Hard gate for the primary guest, independent of the progress score"""
    if id_proof_waived(identity):
        return True
    return has_complete_id_proof(guest)

def missing_fields(state: RegistrationState) -> List[str]:
    """Names of the required fields that still block submission"""
    missing = []
    primary = state.primary
    if len((primary.full_name or "").strip()) < 2:
        missing.append("guests.0.full_name")
    if state.expected_checkout is None:
        missing.append("expected_checkout")
    if state.advance_paid < 0:
        missing.append("advance_paid")
    if not id_proof_waived(state.identity):
        if not primary.id_proof_type:
            missing.append("guests.0.id_proof_type")
        if not primary.id_front_image:
            missing.append("guests.0.id_front_image")
        if not primary.id_back_image:
            missing.append("guests.0.id_back_image")
    return missing

def progress(state: RegistrationState) -> int:
    """Completion score 0-100 used as the soft submit gate"""
    primary = state.primary
    score = 0
    if primary.full_name:
        score += NAME_WEIGHT
    if primary.phone:
        score += PHONE_WEIGHT
    if state.expected_checkout is not None:
        score += DEPARTURE_WEIGHT
    if id_proof_waived(state.identity):
        score += ID_WAIVED_WEIGHT
    else:
        if primary.id_proof_type:
            score += ID_TYPE_WEIGHT
        if primary.id_front_image:
            score += ID_FRONT_WEIGHT
        if primary.id_back_image:
            score += ID_BACK_WEIGHT
    return score

def can_submit(state: RegistrationState) -> bool:
    return progress(state) >= settings.SUBMIT_PROGRESS_THRESHOLD

# ─── reducer ──────────────────────────────────────────────────────────────────

def _replace_guest(state: RegistrationState, index: int, **changes) -> RegistrationState:
    if index < 0 or index >= len(state.guests):
        raise ValueError(f"No guest at position {index}")
    guests = list(state.guests)
    guests[index] = guests[index].model_copy(update=changes)
    return state.model_copy(update={"guests": tuple(guests)})

def _primary_index(state: RegistrationState) -> int:
    for index, guest in enumerate(state.guests):
        if guest.is_primary:
            return index
    return 0

def _apply_lookup(state: RegistrationState, lookup: GuestLookupResult) -> RegistrationState:
    identity = identity_from_lookup(lookup)
    state = state.model_copy(update={"identity": identity})
    if not lookup.guest_exists:
        return state
    index = _primary_index(state)
    primary = state.guests[index]
    changes: Dict[str, Any] = {}
    if not primary.full_name and lookup.full_name:
        changes["full_name"] = lookup.full_name
    if not primary.phone and lookup.phone_number:
        changes["phone"] = lookup.phone_number
    if isinstance(identity, ReturningVerifiedGuest) and not primary.id_proof_type:
        changes["id_proof_type"] = identity.id_proof_type
    return _replace_guest(state, index, **changes) if changes else state

GUEST_FIELDS = set(GuestDraft.model_fields) - {"is_primary"}

def reduce(state: RegistrationState, action: Dict[str, Any]) -> RegistrationState:
    """Return the state that results from applying ``action``"""
    kind = action.get("type")

    if kind == "toggle_ac":
        return state.model_copy(update={"has_ac": bool(action.get("value", not state.has_ac))})
    if kind == "toggle_geyser":
        return state.model_copy(update={"has_geyser": bool(action.get("value", not state.has_geyser))})
    if kind == "set_departure":
        return state.model_copy(update={"expected_checkout": action.get("value")})
    if kind == "set_advance":
        return state.model_copy(update={"advance_paid": float(action.get("value") or 0)})
    if kind == "set_notes":
        return state.model_copy(update={"notes": action.get("value") or ""})

    if kind == "add_guest":
        return state.model_copy(update={"guests": state.guests + (GuestDraft(is_primary=False),)})
    if kind == "remove_guest":
        index = action["index"]
        if state.guests[index].is_primary:
            raise ValueError("The primary guest cannot be removed")
        guests = state.guests[:index] + state.guests[index + 1:]
        return state.model_copy(update={"guests": guests})

    if kind in ("set_guest_field", "set_primary_field"):
        field = action["field"]
        if field not in GUEST_FIELDS:
            raise ValueError(f"Unknown guest field: {field}")
        index = _primary_index(state) if kind == "set_primary_field" else action["index"]
        return _replace_guest(state, index, **{field: action.get("value")})

    if kind == "set_image":
        side = action["side"]
        if side not in ("front", "back"):
            raise ValueError(f"Unknown image side: {side}")
        index = action.get("index", _primary_index(state))
        return _replace_guest(state, index, **{f"id_{side}_image": action.get("value")})

    if kind == "apply_lookup":
        return _apply_lookup(state, action["lookup"])

    raise ValueError(f"Unknown registration action: {kind}")

# ─── draft evaluation over HTTP ───────────────────────────────────────────────

class RegistrationDraft(BaseModel):
    """Partially filled form sent by the front desk for a live check"""
    room_id: str
    expected_checkout: Optional[datetime] = None
    has_ac: bool = False
    has_geyser: bool = False
    advance_paid: float = 0
    notes: Optional[str] = None
    guests: List[GuestDraft] = Field(default_factory=lambda: [GuestDraft(is_primary=True)])

class RegistrationCheck(BaseModel):
    identity: GuestIdentity
    progress: int
    can_submit: bool
    total_amount: float
    missing_fields: List[str]
    prefill: Optional[GuestDraft] = None

def state_from_draft(room: Dict[str, Any], draft: RegistrationDraft) -> RegistrationState:
    guests = tuple(draft.guests) or (GuestDraft(is_primary=True),)
    if not any(g.is_primary for g in guests):
        guests = (guests[0].model_copy(update={"is_primary": True}),) + guests[1:]
    return RegistrationState(
        room_id=draft.room_id,
        base_price=room.get("base_price", 0),
        ac_charge=room.get("ac_charge", 0),
        geyser_charge=room.get("geyser_charge", 0),
        has_ac=draft.has_ac,
        has_geyser=draft.has_geyser,
        expected_checkout=draft.expected_checkout,
        advance_paid=draft.advance_paid,
        notes=draft.notes or "",
        guests=guests,
    )

def evaluate(state: RegistrationState) -> RegistrationCheck:
    return RegistrationCheck(
        identity=state.identity,
        progress=progress(state),
        can_submit=can_submit(state),
        total_amount=state.tariff,
        missing_fields=missing_fields(state),
        prefill=state.primary,
    )
