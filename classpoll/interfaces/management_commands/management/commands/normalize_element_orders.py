from argparse import ArgumentParser
from typing import Any

from django.core.management.base import BaseCommand, CommandError

from classpoll.actions.elements import normalize_all_element_orders
from classpoll.data.models import User


class Command(BaseCommand):
    help = "Renumber element orders to 0..n-1 in every session."

    def add_arguments(self, parser: ArgumentParser) -> None:
        parser.add_argument(
            "--teacher",
            metavar="EMAIL",
            help="Only repair sessions owned by this teacher.",
        )

    def handle(self, *args: Any, **options: Any) -> None:
        teacher = None
        if options["teacher"]:
            teacher = User.objects.filter(email__iexact=options["teacher"]).first()
            if teacher is None:
                raise CommandError(f"No teacher with email {options['teacher']!r}.")

        sessions_fixed, elements_fixed = normalize_all_element_orders(teacher)
        self.stdout.write(
            self.style.SUCCESS(
                f"Repaired {elements_fixed} element(s) in {sessions_fixed} session(s)."
            )
        )
