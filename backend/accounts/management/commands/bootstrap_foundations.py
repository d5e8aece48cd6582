from django.core.management.base import BaseCommand
from django.utils.crypto import get_random_string
from django.utils.text import slugify

from accounts.models import User, Organization, OrgMembership, Role


class Command(BaseCommand):
    help = "Create a superuser, a demo organization and a principal membership (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--superuser-email", default="admin@samvera.local")
        parser.add_argument("--superuser-password", default=None)
        parser.add_argument("--org-name", default="Demo School")
        parser.add_argument("--principal-email", default="principal@samvera.local")
        parser.add_argument("--principal-password", default=None)

    def _ensure_user(self, email, password, **extra):
        user, created = User.objects.get_or_create(email=email.lower(), defaults=extra)
        if created:
            user.set_password(password)
            user.save()
            self.stdout.write(self.style.SUCCESS(f"Created {email} / {password}"))
        else:
            self.stdout.write(self.style.WARNING(f"{email} already exists"))
        return user

    def handle(self, *args, **opts):
        su = self._ensure_user(
            opts["superuser_email"], opts["superuser_password"] or get_random_string(16),
            is_staff=True, is_superuser=True,
        )

        org_name = opts["org_name"]
        org, created = Organization.objects.get_or_create(
            slug=slugify(org_name) or "demo-school",
            defaults={"name": org_name, "created_by": su, "updated_by": su},
        )
        msg = "Organization created" if created else "Organization ready"
        self.stdout.write(self.style.SUCCESS(f"{msg}: {org.name} (slug={org.slug})"))

        principal = self._ensure_user(
            opts["principal_email"], opts["principal_password"] or get_random_string(16),
            first_name="Demo", last_name="Principal",
        )
        OrgMembership.objects.get_or_create(user=principal, organization=org, role=Role.PRINCIPAL)
        self.stdout.write(self.style.SUCCESS("Membership added (PRINCIPAL)."))

        self.stdout.write(self.style.SUCCESS("Foundations bootstrap complete."))
