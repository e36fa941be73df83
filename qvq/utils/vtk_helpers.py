from typing import Sequence

import vtk
import numpy as np

from qvq.core.quaternion import Quaternion, to_rotation_matrix


def pose_matrix(position: Sequence[float], orientation: Quaternion, scale: float) -> vtk.vtkMatrix4x4:
    """
    4x4 matrix of ``translate(position) * rotate(orientation) * scale``.
    """
    m = np.eye(4)
    m[:3, :3] = float(scale) * to_rotation_matrix(orientation)
    m[:3, 3] = np.asarray(position, dtype=float)

    matrix = vtk.vtkMatrix4x4()
    for i in range(4):
        for j in range(4):
            matrix.SetElement(i, j, float(m[i, j]))
    return matrix


def apply_pose(prop: vtk.vtkProp3D, position: Sequence[float], orientation: Quaternion, scale: float) -> None:
    prop.SetUserMatrix(pose_matrix(position, orientation, scale))


def set_color(actor: vtk.vtkActor, color: Sequence[float], opacity: float = 1.0) -> None:
    prop = actor.GetProperty()
    prop.SetColor(*color)
    prop.SetOpacity(opacity)


def make_sphere_actor(radius: float, color: Sequence[float]) -> tuple[vtk.vtkActor, vtk.vtkSphereSource]:
    source = vtk.vtkSphereSource()
    source.SetRadius(radius)
    source.SetThetaResolution(24)
    source.SetPhiResolution(24)

    mapper = vtk.vtkPolyDataMapper()
    mapper.SetInputConnection(source.GetOutputPort())
    actor = vtk.vtkActor()
    actor.SetMapper(mapper)
    set_color(actor, color)
    return actor, source


def make_line_actor(color: Sequence[float], width: float = 2.0) -> tuple[vtk.vtkActor, vtk.vtkLineSource]:
    source = vtk.vtkLineSource()
    source.SetPoint1(0.0, 0.0, 0.0)
    source.SetPoint2(0.0, 0.0, 0.0)

    mapper = vtk.vtkPolyDataMapper()
    mapper.SetInputConnection(source.GetOutputPort())
    actor = vtk.vtkActor()
    actor.SetMapper(mapper)
    actor.GetProperty().SetLineWidth(width)
    set_color(actor, color)
    return actor, source


def make_arrow_actor(color: Sequence[float]) -> vtk.vtkActor:
    """Unit arrow from the origin along +z."""
    source = vtk.vtkArrowSource()
    source.SetShaftRadius(0.02)
    source.SetTipRadius(0.06)
    source.SetTipLength(0.2)

    # vtkArrowSource points along +x
    to_z = vtk.vtkTransform()
    to_z.RotateY(-90.0)
    oriented = vtk.vtkTransformPolyDataFilter()
    oriented.SetInputConnection(source.GetOutputPort())
    oriented.SetTransform(to_z)

    mapper = vtk.vtkPolyDataMapper()
    mapper.SetInputConnection(oriented.GetOutputPort())
    actor = vtk.vtkActor()
    actor.SetMapper(mapper)
    set_color(actor, color)
    return actor


def make_frame_actor(length: float = 1.0) -> vtk.vtkAxesActor:
    """Coordinate frame: red x, green y, blue z, unlabelled."""
    axes = vtk.vtkAxesActor()
    axes.SetTotalLength(length, length, length)
    axes.SetShaftTypeToLine()
    axes.AxisLabelsOff()
    return axes


def make_grid_actor(size: float = 10.0, divisions: int = 10,
                    color: Sequence[float] = (0.27, 0.27, 0.27)) -> vtk.vtkActor:
    """Square grid in the XY plane centred on the origin."""
    half = size / 2.0
    ticks = np.linspace(-half, half, divisions + 1)

    points = vtk.vtkPoints()
    lines = vtk.vtkCellArray()
    for t in ticks:
        for p1, p2 in (((t, -half, 0.0), (t, half, 0.0)), ((-half, t, 0.0), (half, t, 0.0))):
            i = points.InsertNextPoint(*p1)
            j = points.InsertNextPoint(*p2)
            lines.InsertNextCell(2)
            lines.InsertCellPoint(i)
            lines.InsertCellPoint(j)

    poly = vtk.vtkPolyData()
    poly.SetPoints(points)
    poly.SetLines(lines)

    mapper = vtk.vtkPolyDataMapper()
    mapper.SetInputData(poly)
    actor = vtk.vtkActor()
    actor.SetMapper(mapper)
    set_color(actor, color)
    actor.PickableOff()
    return actor
