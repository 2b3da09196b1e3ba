"""
Referral Service for the loyalty portal.

Each client has one persistent referral code. Every invite they send reuses
it, so a signup can always be traced back to the referrer. Bonus points are
granted by the database once the referral completes; the portal only records
invites and reads their status.
"""
import random
import string
from typing import Any, Dict, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Client, Referral
from ..utils.errors import ErrorCode
from ..utils.exceptions import ConfigurationError, ConflictError, ValidationError
from .loyalty_settings import get_loyalty_settings

REFERRAL_CODE_LENGTH = 8
REFERRAL_STATUSES = ('pending', 'signed_up', 'completed')


def generate_referral_code() -> str:
    """Generate a unique referral code."""
    while True:
        code = ''.join(random.choices(string.ascii_uppercase + string.digits, k=REFERRAL_CODE_LENGTH))
        if not Client.query.filter_by(referral_code=code).first():
            return code


def normalize_email(email: Any) -> str:
    """
    Lower-cased, trimmed email.

    Raises:
        ValidationError: Missing or not shaped like an address
    """
    email = email.strip().lower() if isinstance(email, str) else ''
    if '@' not in email or '.' not in email.split('@')[-1]:
        raise ValidationError('Please enter a valid email address', field='email')
    return email


class ReferralService:
    """
    Refer-a-friend page for one client.

    Usage:
        service = ReferralService(client)
        service.invite('friend@example.com')
        history = service.get_history()
    """

    def __init__(self, client: Client, settings: Optional[Dict[str, Any]] = None):
        self.client = client
        self.settings = settings or get_loyalty_settings()

    def ensure_referral_code(self) -> str:
        """Return the client's referral code, creating it on first use."""
        if not self.client.referral_code:
            self.client.referral_code = generate_referral_code()
            db.session.commit()
            current_app.logger.info(f"Created referral code for client {self.client.id}")
        return self.client.referral_code

    def get_referral_link(self, code: Optional[str] = None) -> str:
        """
        Signup link carrying the referral code.

        Raises:
            ConfigurationError: SITE_URL is not set
        """
        base_url = (current_app.config.get('SITE_URL') or '').rstrip('/')
        if not base_url:
            raise ConfigurationError('SITE_URL is not configured')
        return f'{base_url}/signup?ref={code or self.ensure_referral_code()}'

    def invite(self, email: Any) -> Referral:
        """
        Record an invite for a friend.

        Raises:
            ValidationError: Invalid email
            ConflictError: This client already invited the address
        """
        email = normalize_email(email)
        if email == (self.client.email or '').lower():
            raise ValidationError('You cannot refer yourself', field='email')

        existing = Referral.query.filter_by(
            referrer_client_id=self.client.id,
            referee_email=email
        ).first()
        if existing:
            raise ConflictError(
                'Looks like you already invited this email',
                ErrorCode.REFERRAL_ALREADY_INVITED.value
            )

        code = self.ensure_referral_code()
        referral = Referral(
            referrer_client_id=self.client.id,
            referee_email=email,
            referral_code=code,
            referral_link=self.get_referral_link(code),
            status='pending',
        )
        db.session.add(referral)
        try:
            db.session.commit()
        except IntegrityError:
            # Concurrent invite for the same address
            db.session.rollback()
            raise ConflictError(
                'Looks like you already invited this email',
                ErrorCode.REFERRAL_ALREADY_INVITED.value
            )

        current_app.logger.info(f"Client {self.client.id} invited a friend (referral {referral.id})")
        return referral

    def get_history(self) -> Dict[str, Any]:
        """Invites newest first, with counts by status and bonus points earned."""
        referrals = Referral.query.filter_by(
            referrer_client_id=self.client.id
        ).order_by(Referral.created_at.desc(), Referral.id.desc()).all()

        counts = {status: 0 for status in REFERRAL_STATUSES}
        for referral in referrals:
            if referral.status in counts:
                counts[referral.status] += 1

        code = self.ensure_referral_code()
        return {
            'referral_code': code,
            'referral_link': self.get_referral_link(code),
            'referrals': [r.to_dict() for r in referrals],
            'stats': {
                'total_invites': len(referrals),
                **counts,
                'total_points_earned': sum(
                    r.bonus_points or 0 for r in referrals if r.status == 'completed'
                ),
            },
            'bonus': {
                'referrer': self.settings['referrer_bonus_points'],
                'referee': self.settings['referee_bonus_points'],
            },
        }
