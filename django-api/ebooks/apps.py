from django.apps import AppConfig


class EbooksConfig(AppConfig):
    name = "ebooks"
    verbose_name = "E-books"

    def ready(self) -> None:
        from ebooks import signals  # noqa: F401
