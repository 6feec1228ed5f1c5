# surfpath/pipeline.py
"""Per-surface path synthesis and trajectory library assembly."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple

import numpy as np

from utils.config import Pose
from utils.error_tracker import ErrorTracker, PathSynthesisError
from utils.logger import Logger

from .boundary import filter_boundaries
from .builders import BlendPathBuilder, EdgePathBuilder, ScanPathBuilder
from .classify import PathType, blend_name, edge_name, scan_name
from .config import (
    BlendPlanParams,
    PathPlanningParams,
    ScanPlanParams,
    SynthesisCfg,
    resolve_blend_params,
    resolve_scan_params,
)
from .data import CloudType, DataCoordinator, PoseType
from .mesh import MeshImporter
from .paths import NamedPath, ProcessPathResult, ProcessPlanResult, SynthesisResult, TrajectoryLibrary
from .segmentation import SegmentationResult, segment_cloud
from .services import Services

LOG = Logger.get_logger("pipeline")


class PathSynthesisOrchestrator:
    """
    Surface ids in, trajectory library out.

    Every failure is contained to the path (or plan) it belongs to: a missing
    blend path does not stop edge or scan paths, and one surface never stops
    the next.
    """

    def __init__(
        self,
        data: DataCoordinator,
        cfg: SynthesisCfg | None = None,
        services: Services | None = None,
    ) -> None:
        self.data = data
        self.cfg = cfg or SynthesisCfg()
        self.services = services or Services()
        self.blend_builder = BlendPathBuilder(self.services.blend_planner)
        self.edge_builder = EdgePathBuilder(self.services.boundary_trajectory)
        self.scan_builder = ScanPathBuilder(self.services.scan_profile, self.cfg.ramp)

    # ============================== PATHS ====================================

    def generate_process_path(
        self, id: int, params: PathPlanningParams | None = None
    ) -> ProcessPathResult:
        """Look the surface up in the data store and build its paths."""
        name = self.data.get_surface_name(id)
        mesh = self.data.get_surface_mesh(id)
        cloud = self.data.get_cloud(CloudType.SURFACE, id)
        return self.generate_surface_paths(id, name, mesh, cloud, params or self.cfg.params)

    def generate_surface_paths(
        self,
        id: int,
        name: str,
        mesh,
        cloud,
        params: PathPlanningParams,
    ) -> ProcessPathResult:
        result = ProcessPathResult(surface_id=id, surface_name=name)

        importer = MeshImporter()
        if not importer.calculate_simple_boundary(mesh):
            LOG.warning(f"[{name}] could not calculate boundary for mesh")
            return result
        boundaries = filter_boundaries(importer.boundaries, self.cfg.boundary)
        pose = importer.pose

        blend = self._guard("blend", name, self.blend_builder.build, boundaries, pose, params)
        if blend is not None:
            result.add(NamedPath(blend_name(name), blend, PathType.BLEND))
            self.data.set_poses(PoseType.BLEND, id, blend)
        else:
            LOG.warning(f"[{name}] could not calculate blend path")
        LOG.info(f"[{name}] blend path generation complete")

        if cloud is None:
            LOG.warning(f"[{name}] no surface cloud, skipping edge paths")
        else:
            self._add_edge_paths(result, cloud, pose)

        scan = self._guard("scan", name, self.scan_builder.build, boundaries, pose, params)
        if scan is not None:
            result.add(NamedPath(scan_name(name), scan, PathType.SCAN))
            self.data.set_poses(PoseType.SCAN, id, scan)
        else:
            LOG.warning(f"[{name}] could not calculate scan path")

        LOG.info(f"[{name}] paths: {result.names()}")
        return result

    def segment(self, cloud) -> SegmentationResult:
        return segment_cloud(cloud, self.cfg.segmentation, self.services.boundary_detector)

    def _add_edge_paths(self, result: ProcessPathResult, cloud, pose: Pose) -> None:
        name = result.surface_name
        seg = self._guard("segmentation", name, self.segment, cloud)
        if seg is None or len(seg) == 0:
            LOG.warning(f"[{name}] no boundary chains")
            return
        self.data.set_cloud(CloudType.BOUNDARY, result.surface_id, np.vstack(seg.smoothed))
        min_pts = self.cfg.segmentation.min_chain_points
        for i in seg.eligible(min_pts):
            edge = self._guard(f"edge {i}", name, self.edge_builder.build, seg, i, pose)
            if edge is None:
                LOG.warning(f"[{name}] could not calculate edge path #{i}")
                continue
            path = NamedPath(edge_name(name, i), edge, PathType.EDGE)
            result.add(path)
            result.edge_poses.extend(edge)
            self.data.add_edge(result.surface_id, path.name, edge)
        LOG.info(
            f"[{name}] {len(seg)} chains, {len(seg.eligible(min_pts))} >= {min_pts} pts"
        )

    @staticmethod
    def _guard(what: str, surface: str, fn, *args):
        try:
            return fn(*args)
        except Exception as e:
            LOG.warning(f"[{surface}] {what} failed: {e}")
            if not isinstance(e, PathSynthesisError):
                ErrorTracker.report(e)
            return None

    # ============================== PLANS ====================================

    def generate_process_plan(
        self,
        path: NamedPath,
        blend_params: BlendPlanParams,
        scan_params: ScanPlanParams,
    ) -> ProcessPlanResult:
        """Blend and edge paths share the blend planner; scans use their own."""
        result = ProcessPlanResult()
        planner = self.services.process_planner
        if path.path_type is None:
            LOG.error(f"tried to plan an unrecognized path type: {path.name}")
            return result
        try:
            if path.path_type in (PathType.BLEND, PathType.EDGE):
                plan = planner.plan_blend_process(path.poses, blend_params)
            else:
                plan = planner.plan_scan_process(path.poses, scan_params)
        except Exception as e:
            LOG.error(f"failed to plan for {path.name}: {e}")
            if not isinstance(e, PathSynthesisError):
                ErrorTracker.report(e)
            return result
        if plan is None:
            LOG.error(f"failed to plan for {path.name}")
            return result
        result.plans.append((path.name, plan))
        return result

    # ============================== LIBRARY ==================================

    def _process_surface(
        self,
        id: int,
        params: PathPlanningParams,
        blend_params: BlendPlanParams,
        scan_params: ScanPlanParams,
    ) -> Tuple[Optional[ProcessPathResult], ProcessPlanResult]:
        plans = ProcessPlanResult()
        try:
            paths = self.generate_process_path(id, params)
        except Exception as e:
            LOG.error(f"surface {id}: path generation failed")
            ErrorTracker.report(e)
            return None, plans
        for path in paths.paths:
            plans.plans.extend(
                self.generate_process_plan(path, blend_params, scan_params).plans
            )
        return paths, plans

    def synthesize(self, params: PathPlanningParams | None = None) -> SynthesisResult:
        """
        Build paths and plans for every selected surface. The returned result
        is owned by this call; nothing carries over between calls.
        """
        params = params or self.cfg.params
        blend_params = resolve_blend_params(params, self.cfg)
        scan_params = resolve_scan_params(params, self.cfg)
        ids = self.data.get_selected_ids()
        LOG.info(f"[START] synthesizing {len(ids)} surfaces")

        def run_one(id: int):
            return self._process_surface(id, params, blend_params, scan_params)

        if self.cfg.workers > 1 and len(ids) > 1:
            with ThreadPoolExecutor(max_workers=self.cfg.workers) as pool:
                per_surface: List = list(pool.map(run_one, ids))
        else:
            per_surface = [run_one(i) for i in Logger.progress(ids, desc="surfaces")]

        out = SynthesisResult()
        for paths, plans in per_surface:
            if paths is not None:
                out.paths.append(paths)
                for path in paths.paths:
                    out.record(path)
            out.merge(plans)
        LOG.info(
            f"[DONE] library: {len(out.library)} plans "
            f"(blend={len(out.blend_poses)} edge={len(out.edge_poses)} scan={len(out.scan_poses)})"
        )
        return out

    def generate_motion_library(
        self, params: PathPlanningParams | None = None
    ) -> TrajectoryLibrary:
        return self.synthesize(params).library
