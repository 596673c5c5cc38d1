"""Account holder signup and login"""

import logging
from typing import Tuple
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from banking_gateway.config import settings
from banking_gateway.domain.exceptions import ConflictError, InternalError, InvalidInputError, UnauthenticatedError
from banking_gateway.domain.models import IssuedSession, UserProfile
from banking_gateway.infrastructure.database.repositories import UserRepository, to_user_profile
from banking_gateway.services.session_authority import SessionAuthority
from banking_gateway.utils.hashing import hash_secret, verify_secret
from banking_gateway.utils.phone import format_phone_number


def register_user(
    db: Session,
    authority: SessionAuthority,
    *,
    email: str,
    password: str,
    ssn: str,
    phone_number: str,
    first_name: str,
    last_name: str,
    date_of_birth: str,
    address: str,
    city: str,
    state: str,
    zip_code: str,
) -> Tuple[UserProfile, IssuedSession]:
    """
    Create an account holder and log them in.

    Password and SSN are bcrypt-hashed with independent salts; the phone
    number is stored in E.164.

    Raises:
        ConflictError: email already registered
        InvalidInputError: phone number cannot be normalized
    """
    email = email.strip().lower()
    users = UserRepository(db)

    if users.get_by_email(email):
        raise ConflictError("User already exists")

    formatted_phone = format_phone_number(phone_number, settings.default_phone_region)
    if not formatted_phone:
        raise InvalidInputError("Failed to format phone number")

    try:
        user = users.create_user(
            email=email,
            password_hash=hash_secret(password, settings.bcrypt_rounds),
            ssn_hash=hash_secret(ssn, settings.bcrypt_rounds),
            phone_number=formatted_phone,
            first_name=first_name,
            last_name=last_name,
            date_of_birth=date_of_birth,
            address=address,
            city=city,
            state=state.upper(),
            zip_code=zip_code,
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("User already exists")

    if user.id is None:
        raise InternalError("Failed to create user")

    logging.info("User registered", extra={"user_id": user.id})
    session = authority.issue(user.id)
    return to_user_profile(user), session


def authenticate_user(
    db: Session,
    authority: SessionAuthority,
    email: str,
    password: str,
) -> Tuple[UserProfile, IssuedSession]:
    """Check credentials and issue a session; unknown email and bad password look the same"""
    user = UserRepository(db).get_by_email(email.strip().lower())

    if user is None or not verify_secret(password, user.password_hash):
        raise UnauthenticatedError("Invalid credentials")

    session = authority.issue(user.id)
    return to_user_profile(user), session
