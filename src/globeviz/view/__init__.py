# SPDX-License-Identifier: Apache-2.0
from .controller import RotationController, RotationHandle
from .state import INITIAL_VIEW_STATE, ViewState

__all__ = ["INITIAL_VIEW_STATE", "RotationController", "RotationHandle", "ViewState"]
