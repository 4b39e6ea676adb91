"""
application.services.terms - Terms and Conditions gate and documents.

Gated features (the Oracle) require an accepted terms record. The
accepted version is stored as given and is not checked against the
current one.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from domain.entities import Account
from domain.exceptions import TermsNotAcceptedError
from domain.ports import AccountRepository

logger = logging.getLogger(__name__)

TERMS_VERSION = "1.0"
TERMS_LAST_UPDATED = "2025-12-09"

TERMS_SECTIONS = [
    {
        "id": "acceptance",
        "title": "1. Acceptance of Terms",
        "content": (
            'By accessing and using "The Invention of the Banana" website and services, you agree '
            "to be bound by these Terms and Conditions. If you do not agree to these terms, please "
            "do not use our services."
        ),
    },
    {
        "id": "description",
        "title": "2. Description of Service",
        "content": (
            '"The Invention of the Banana" provides an educational and entertainment platform '
            "featuring fictional stories about the invention of bananas, an AI Oracle for "
            "banana-related queries, and a community for banana enthusiasts."
        ),
    },
    {
        "id": "user-accounts",
        "title": "3. User Accounts",
        "content": (
            "To access certain features, you must create an account using Google or GitHub OAuth. "
            "You are responsible for maintaining the confidentiality of your account and all "
            "activities under it. You must be at least 13 years old to use this service."
        ),
    },
    {
        "id": "ai-oracle",
        "title": "4. AI Oracle Usage",
        "content": (
            "The AI Oracle feature uses artificial intelligence to generate responses about "
            "bananas. These responses are for entertainment purposes only and should not be "
            "considered factual information. Free tier users are limited to 10 Oracle queries "
            "per day."
        ),
    },
    {
        "id": "content",
        "title": "5. User Content",
        "content": (
            "You retain ownership of content you submit. By submitting content, you grant us a "
            "non-exclusive, worldwide, royalty-free license to use, display, and distribute your "
            "content on our platform."
        ),
    },
    {
        "id": "prohibited",
        "title": "6. Prohibited Conduct",
        "content": (
            "You agree not to: (a) use the service for illegal purposes, (b) attempt to gain "
            "unauthorized access, (c) interfere with the service's operation, (d) submit false "
            "or misleading information, (e) impersonate others."
        ),
    },
    {
        "id": "disclaimer",
        "title": "7. Disclaimer",
        "content": (
            'THE SERVICE IS PROVIDED "AS IS" WITHOUT WARRANTIES OF ANY KIND. We do not warrant '
            "that the service will be uninterrupted, error-free, or secure. All banana invention "
            "stories are fictional and for entertainment purposes."
        ),
    },
    {
        "id": "limitation",
        "title": "8. Limitation of Liability",
        "content": (
            "IN NO EVENT SHALL WE BE LIABLE FOR ANY INDIRECT, INCIDENTAL, SPECIAL, CONSEQUENTIAL, "
            "OR PUNITIVE DAMAGES ARISING FROM YOUR USE OF THE SERVICE."
        ),
    },
    {
        "id": "changes",
        "title": "9. Changes to Terms",
        "content": (
            "We reserve the right to modify these terms at any time. We will notify users of "
            "significant changes via email or prominent notice on the website. Continued use "
            "after changes constitutes acceptance."
        ),
    },
    {
        "id": "contact",
        "title": "10. Contact Information",
        "content": (
            "For questions about these Terms and Conditions, please contact us at "
            "legal@banana-site.com."
        ),
    },
]

TERMS_SUMMARY = (
    "By using The Invention of the Banana, you agree to use the service responsibly, "
    "understand that all content is fictional and for entertainment, and accept the "
    "limitations of our AI Oracle feature."
)

PRIVACY_SECTIONS = [
    {
        "id": "collection",
        "title": "1. Information We Collect",
        "content": (
            "We collect: (a) Account information from OAuth providers (email, name, avatar), "
            "(b) Usage data and analytics, (c) Content you submit, (d) AI Oracle query history."
        ),
    },
    {
        "id": "use",
        "title": "2. How We Use Information",
        "content": (
            "We use your information to: (a) Provide and improve our services, (b) Personalize "
            "your experience, (c) Communicate with you, (d) Ensure security and prevent abuse."
        ),
    },
    {
        "id": "sharing",
        "title": "3. Information Sharing",
        "content": (
            "We do not sell your personal information. We may share data with: (a) Service "
            "providers who assist our operations, (b) Law enforcement when required, (c) In "
            "connection with a business transfer."
        ),
    },
    {
        "id": "security",
        "title": "4. Data Security",
        "content": (
            "We implement industry-standard security measures to protect your data. However, no "
            "method of transmission over the Internet is 100% secure."
        ),
    },
    {
        "id": "rights",
        "title": "5. Your Rights",
        "content": (
            "You have the right to: (a) Access your data, (b) Correct inaccuracies, (c) Delete "
            "your account, (d) Export your data. Contact us to exercise these rights."
        ),
    },
]


def terms_document() -> dict:
    return {
        "version": TERMS_VERSION,
        "lastUpdated": TERMS_LAST_UPDATED,
        "title": "Terms and Conditions - The Invention of the Banana",
        "sections": TERMS_SECTIONS,
        "summary": TERMS_SUMMARY,
    }


def privacy_document() -> dict:
    return {
        "version": TERMS_VERSION,
        "lastUpdated": TERMS_LAST_UPDATED,
        "title": "Privacy Policy - The Invention of the Banana",
        "sections": PRIVACY_SECTIONS,
    }


class TermsService:
    """Record and enforce terms acceptance."""

    def __init__(self, account_repo: AccountRepository):
        self._account_repo = account_repo

    @staticmethod
    def require_accepted(account: Account) -> None:
        if not account.terms_accepted:
            raise TermsNotAcceptedError(
                "You must accept the Terms and Conditions to use this feature"
            )

    async def accept(self, account: Account, version: Optional[str] = None) -> Account:
        version = version or TERMS_VERSION
        now = datetime.now(timezone.utc)
        await self._account_repo.accept_terms(account.id, version, now)
        account.terms_accepted = True
        account.terms_version = version
        account.terms_accepted_at = now
        logger.info("Account %d accepted terms v%s", account.id, version)
        return account
