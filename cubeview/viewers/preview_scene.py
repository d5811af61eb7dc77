"""VTK scene of the product preview: a cube with six tinted faces."""
from __future__ import annotations

import logging

import vtk

from cubeview.core.orientation import Orientation

logger = logging.getLogger(__name__)


def hex_to_rgb(color: str) -> tuple[int, int, int]:
    """'#22d3ee' -> (34, 211, 238)"""
    color = color.lstrip("#")
    return int(color[0:2], 16), int(color[2:4], 16), int(color[4:6], 16)


# vtkCubeSource emits its faces in this order: -X, +X, -Y, +Y, -Z, +Z.
# (color, opacity) per face.
FACE_STYLES: dict[str, tuple[str, float]] = {
    "left": ("#06b6d4", 0.8),
    "right": ("#06b6d4", 0.8),
    "bottom": ("#0891b2", 0.7),
    "top": ("#a5f3fc", 0.5),
    "back": ("#67e8f9", 0.6),
    "front": ("#22d3ee", 1.0),
}

BACKGROUND_BOTTOM = (0.953, 0.957, 0.965)  # gray-100
BACKGROUND_TOP = (0.898, 0.906, 0.922)  # gray-200


class PreviewScene:
    """Builds the cube actor and applies orientations to it."""

    def __init__(self, renderer: vtk.vtkRenderer, edge_length: float = 2.0) -> None:
        self.renderer = renderer
        self.actor = self._build_cube_actor(edge_length)

        self.renderer.AddActor(self.actor)
        self.renderer.SetBackground(*BACKGROUND_BOTTOM)
        self.renderer.SetBackground2(*BACKGROUND_TOP)
        self.renderer.GradientBackgroundOn()
        # Translucent faces need depth peeling to blend in the right order.
        self.renderer.SetUseDepthPeeling(1)
        self.renderer.SetMaximumNumberOfPeels(8)
        self.reset_camera()

    @staticmethod
    def _build_cube_actor(edge_length: float) -> vtk.vtkActor:
        cube = vtk.vtkCubeSource()
        cube.SetXLength(edge_length)
        cube.SetYLength(edge_length)
        cube.SetZLength(edge_length)
        cube.Update()

        poly = vtk.vtkPolyData()
        poly.DeepCopy(cube.GetOutput())

        colors = vtk.vtkUnsignedCharArray()
        colors.SetName("FaceColors")
        colors.SetNumberOfComponents(4)
        for color, opacity in FACE_STYLES.values():
            r, g, b = hex_to_rgb(color)
            colors.InsertNextTuple4(r, g, b, round(opacity * 255))
        poly.GetCellData().SetScalars(colors)

        mapper = vtk.vtkPolyDataMapper()
        mapper.SetInputData(poly)
        mapper.SetScalarModeToUseCellData()
        mapper.SetColorModeToDirectScalars()
        mapper.ScalarVisibilityOn()

        actor = vtk.vtkActor()
        actor.SetMapper(mapper)
        actor.GetProperty().SetAmbient(0.3)
        actor.GetProperty().SetDiffuse(0.7)
        logger.debug("Preview cube created (edge length %s).", edge_length)
        return actor

    def apply_orientation(self, orientation: Orientation) -> None:
        """rotateX(pitch) then rotateY(yaw) around the cube center.

        Pitch is measured with y pointing down, so it is negated for VTK.
        """
        self.actor.SetOrientation(0.0, 0.0, 0.0)
        self.actor.RotateX(-orientation.pitch)
        self.actor.RotateY(orientation.yaw)

    def reset_camera(self) -> None:
        camera = self.renderer.GetActiveCamera()
        camera.SetFocalPoint(0.0, 0.0, 0.0)
        camera.SetPosition(0.0, 0.0, 8.0)
        camera.SetViewUp(0.0, 1.0, 0.0)
        self.renderer.ResetCameraClippingRange()
