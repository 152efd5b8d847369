"""VisibilitySettings - the four independent map toggles."""

from dataclasses import dataclass, fields


@dataclass
class VisibilitySettings:
    """Category visibility toggles.

    show_manifest_places gates START/END/TARGET places, show_contents_places
    gates content events, show_latest_location gates the latest tracker fix.
    show_manifest_path gates the trip-path overlay only, not markers.
    """

    show_manifest_places: bool = True
    show_contents_places: bool = True
    show_latest_location: bool = True
    show_manifest_path: bool = True

    @classmethod
    def setting_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    def _check(self, setting: str) -> None:
        if setting not in self.setting_names():
            raise ValueError(f"Unknown visibility setting: {setting}")

    def toggle(self, setting: str) -> bool:
        """Flip one flag by name. Returns the new value."""
        self._check(setting)
        value = not getattr(self, setting)
        setattr(self, setting, value)
        return value

    def set(self, setting: str, value: bool) -> None:
        self._check(setting)
        setattr(self, setting, bool(value))
