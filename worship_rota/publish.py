"""
Request body for the external schedule-publishing service.

Only builds the payload; sending it is the caller's business. Building
fails loudly (PublishError) instead of publishing a half-staffed event.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from .errors import PublishError
from .models import Member, ServiceEvent, default_time_for
from .roles import (
    ACOUSTIC_GUITAR, BACKING_VOCALIST, BASS, DRUMS, ELECTRIC_GUITAR, KEYS,
    LEAD_VOCALIST, MEDIA, SOUND_DESK, normalize_role_key, role_label,
)

# Role ("function") ids in the publishing service
DEFAULT_EXTERNAL_ROLE_IDS = {
    LEAD_VOCALIST: "5f31e1d17803d600172af717",
    BACKING_VOCALIST: "64eeab19479eee0008490f98",
    ACOUSTIC_GUITAR: "5f31e5d27803d600172af724",
    ELECTRIC_GUITAR: "5f31e5db7803d600172af725",
    BASS: "5f31e5e47803d600172af726",
    DRUMS: "5f31e5ed7803d600172af727",
    KEYS: "5f31e5fd7803d600172af728",
    SOUND_DESK: "5f31e6377803d600172af72f",
    MEDIA: "64ed5ae519c9940008c3159a",
}


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Permissions(_WireModel):
    manage_songs: bool = Field(False, alias="gerenciarMusicas")


class PublishedMember(_WireModel):
    user_id: str = Field(..., alias="usuario")
    role_ids: List[str] = Field(default_factory=list, alias="instrumentos")
    confirmation: Optional[str] = Field(None, alias="confirmacao")
    permissions: Permissions = Field(default_factory=Permissions, alias="permissoes")
    absence: Optional[str] = Field(None, alias="falta")


class RunSheet(_WireModel):
    id: Optional[str] = Field(None, alias="_id")
    template_id: Optional[str] = Field(None, alias="modeloRoteiroId")
    items: List[Any] = Field(default_factory=list, alias="itens")


class PublishPayload(_WireModel):
    id: Optional[str] = Field(None, alias="_id")
    description: str = Field(..., alias="descricao")
    starts_at: str = Field(..., alias="data")
    members: List[PublishedMember] = Field(default_factory=list, alias="usuarios")
    songs: List[Any] = Field(default_factory=list, alias="musicasEscala")
    ministry_id: str = Field(..., alias="ministerio")
    request_confirmation: bool = Field(True, alias="solicitarConfirmacao")
    closed: bool = Field(False, alias="fechada")
    notes: str = Field("", alias="observacoes")
    team_ids: List[str] = Field(default_factory=list, alias="equipesIds")
    palette: Optional[str] = Field(None, alias="paletaDeCores")
    run_sheet: RunSheet = Field(default_factory=RunSheet, alias="roteiro")
    version: Optional[int] = Field(None, alias="__v")

    def to_request_body(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


def _external_role_id(member: Member, role: str,
                      role_ids: Mapping[str, str]) -> Optional[str]:
    key = normalize_role_key(role)
    return member.external_role_ids.get(key) or role_ids.get(key)


def build_publish_payload(
    event: ServiceEvent,
    members: Sequence[Member],
    ministry_id: str,
    request_confirmation: bool = True,
    notes: str = "",
    role_ids: Optional[Mapping[str, str]] = None,
) -> PublishPayload:
    """
    Map a fully staffed event onto the publishing service's schedule shape.

    One entry per member, carrying every role id they hold in the event.
    Raises PublishError for an unassigned slot, an unknown member, a member
    without an external user id, or a role with no external id.
    """
    if not ministry_id:
        raise PublishError("No ministry id configured for publishing.")
    role_ids = DEFAULT_EXTERNAL_ROLE_IDS if role_ids is None else role_ids
    by_id = {m.id: m for m in members}

    grouped: Dict[str, List[str]] = {}
    for slot in event.slots:
        if not slot.member_id:
            raise PublishError(f'Event "{event.name}" has unassigned slots.')
        m = by_id.get(slot.member_id)
        if m is None:
            raise PublishError(f'Assigned member "{slot.member_id}" not found in members list.')
        if not m.external_user_id:
            raise PublishError(f'Member "{m.name}" is missing an external user id.')
        ext_role = _external_role_id(m, slot.role, role_ids)
        if not ext_role:
            raise PublishError(f'No external role id mapping for "{role_label(slot.role)}".')
        held = grouped.setdefault(m.id, [])
        if ext_role not in held:
            held.append(ext_role)

    time = (event.time or "").strip() or default_time_for(event.date)
    return PublishPayload(
        description=event.name,
        starts_at=f"{event.date.isoformat()}T{time}:00.000",
        members=[
            PublishedMember(user_id=by_id[mid].external_user_id, role_ids=ids)
            for mid, ids in grouped.items()
        ],
        ministry_id=ministry_id,
        request_confirmation=request_confirmation,
        notes=notes,
    )
