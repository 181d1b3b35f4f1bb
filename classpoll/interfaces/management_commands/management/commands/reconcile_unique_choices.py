from typing import Any

from django.core.management.base import BaseCommand

from classpoll.readers.responses import find_all_double_claims


class Command(BaseCommand):
    help = (
        "Report choices of single_choice_unique elements that more than one "
        "participant holds."
    )

    def handle(self, *args: Any, **options: Any) -> None:
        found = find_all_double_claims()
        if not found:
            self.stdout.write(self.style.SUCCESS("No double-claimed choices."))
            return
        for element_pk, doubles in sorted(found.items()):
            for choice_id, participants in sorted(doubles.items()):
                self.stdout.write(
                    f"element {element_pk}: choice {choice_id!r} held by "
                    f"{', '.join(participants)}"
                )
        self.stdout.write(
            self.style.WARNING(f"{len(found)} element(s) with double-claimed choices.")
        )
