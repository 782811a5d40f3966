from .http_intake import IntakeSender, intake_url

__all__ = ["IntakeSender", "intake_url"]
