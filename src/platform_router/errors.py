# platform_router/errors.py


class RouterError(Exception):
    """Base for outcomes the host should report instead of crashing on."""


class DegenerateSpine(RouterError, ValueError):
    pass


class UnresolvedSpine(RouterError):
    def __init__(self, element_id, reason: str):
        super().__init__(f"no spine for platform {element_id}: {reason}")
        self.element_id, self.reason = element_id, reason


class AmbiguousPlatformEdge(RouterError):
    def __init__(self, element_id, candidates: list[int], platform_number: str | None = None):
        super().__init__(
            f"platform {element_id} has {len(candidates)} platform edges {candidates}"
            f" and none matches platform number {platform_number!r}"
        )
        self.element_id, self.candidates, self.platform_number = (
            element_id,
            candidates,
            platform_number,
        )


class UnreachableTarget(RouterError):
    def __init__(self, sources, targets):
        super().__init__(f"no route between {len(sources)} sources and {len(targets)} targets")
        self.sources, self.targets = list(sources), list(targets)


class MissingPlatformNumber(RouterError):
    def __init__(self, platform, service: int):
        super().__init__(f"no platform number for {platform} on service {service}")
        self.platform, self.service = platform, service


class Cancelled(RouterError):
    pass


# caller errors, not routing outcomes
class ElementKindError(TypeError):
    pass


class UnknownElement(KeyError):
    def __str__(self) -> str:
        return f"unknown element {self.args[0]}"
