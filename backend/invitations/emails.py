"""Invitation email text, in the recipient's language when we know it."""

SUBJECT = {
    "en": "You're invited to {org} on Samvera",
    "is": "Þér er boðið í {org} á Samvera",
}

BODY = {
    "en": (
        "Hello,\n\n"
        "{inviter} has invited you to join {org} as {role}.\n"
        "Open the link below to set your password and sign in:\n\n"
        "{link}\n\n"
        "The link expires on {expires}.\n"
    ),
    "is": (
        "Halló,\n\n"
        "{inviter} hefur boðið þér að ganga í {org} sem {role}.\n"
        "Opnaðu tengilinn hér að neðan til að velja lykilorð og skrá þig inn:\n\n"
        "{link}\n\n"
        "Tengillinn rennur út {expires}.\n"
    ),
}

ROLE_NAME = {
    "en": {"TEACHER": "a teacher", "GUARDIAN": "a guardian"},
    "is": {"TEACHER": "kennari", "GUARDIAN": "forráðamaður"},
}


def compose(lang: str, org: str, inviter: str, role: str, link: str, expires: str) -> tuple[str, str]:
    lang = lang if lang in SUBJECT else "is"
    subject = SUBJECT[lang].format(org=org)
    body = BODY[lang].format(
        inviter=inviter, org=org, role=ROLE_NAME[lang].get(role, role), link=link, expires=expires,
    )
    return subject, body
