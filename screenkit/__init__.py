"""Synchronous modal bridge and convention-based event dispatch for screen UIs."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from screenkit.api.host import HostLoop
    from screenkit.api.modal import ModalTrigger


def present_modal(loop: "HostLoop", trigger: "ModalTrigger[object]") -> object | None:
    """Run trigger and block (reentrantly) until it signals completion."""
    from screenkit.api.modal import present_modal as api_present_modal

    return api_present_modal(loop, trigger)


__all__ = ["present_modal"]
