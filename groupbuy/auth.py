# -*- coding: utf-8 -*-
# Current actor
# Copyright (c) 2025 Jan Sarivuo

"""
Kutsujan (käyttäjä + rooli) välitys käsittelijöille.

Tunnistus tehdään sovelluksen edessä (API gateway / tunnistuspalvelu),
joka välittää käyttäjän tiedot otsakkeissa X-User-Id ja X-User-Role.
Käsittelijät saavat kutsujan aina eksplisiittisenä Actor-parametrina.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from groupbuy.models import Role, User

log = logging.getLogger("groupbuy.auth")

VALID_ROLES = {r.value for r in Role}


@dataclass(frozen=True)
class Actor:
    user_id: str
    role: str = Role.USER.value


def get_current_actor(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> Actor:
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")

    role = (x_user_role or Role.USER.value).strip().lower()
    if role not in VALID_ROLES:
        log.warning(f"Unknown role '{role}' for user {user_id}, treating as user")
        role = Role.USER.value

    return Actor(user_id=user_id, role=role)


def require_role(*roles: str):
    """Dependency, joka päästää läpi vain annetut roolit."""

    def checker(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in roles:
            log.warning(f"Access denied for {actor.user_id} (role {actor.role})")
            raise HTTPException(status_code=403, detail="Access denied")
        return actor

    return checker


def ensure_user(db: Session, actor: Actor) -> User:
    """Hakee käyttäjärivin tai luo sen ensimmäisellä käyttökerralla."""
    user = db.get(User, actor.user_id)
    if user is None:
        user = User(id=actor.user_id, role=actor.role)
        db.add(user)
        db.flush()
    elif user.role != actor.role:
        user.role = actor.role
    return user
