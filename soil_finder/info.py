# Copyright © 2024 Technology Matters
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see https://www.gnu.org/licenses/.

from dataclasses import dataclass, field
from typing import List, Optional

from .utils import get_texture, map_layer_classes


@dataclass
class CropInfo:
    name: str
    ll: List[float]


@dataclass
class SoilInfo:
    name: str
    soil_type: Optional[str]
    latitude: Optional[float]
    longitude: Optional[float]
    thickness: List[float]
    texture: List[Optional[str]]
    crops: List[CropInfo] = field(default_factory=list)


def _analysis_textures(analysis):
    # Recorded texture names win; otherwise classify from particle size where it was measured.
    textures = []
    for i in range(analysis.layer_count):
        texture = analysis.texture[i] if analysis.texture else None
        if texture is None and analysis.particle_size_clay:
            texture = get_texture(
                sand=analysis.particle_size_sand[i] if analysis.particle_size_sand else None,
                silt=analysis.particle_size_silt[i] if analysis.particle_size_silt else None,
                clay=analysis.particle_size_clay[i],
            )
        textures.append(texture)
    return textures


def layer_textures(soil):
    """Texture class of each water layer of a soil, None where unknown."""
    thickness = soil.water.thickness
    analysis = soil.analysis
    if not thickness:
        return []
    if analysis.layer_count == 0:
        return [None] * len(thickness)

    textures = _analysis_textures(analysis)
    if analysis.thickness == thickness:
        return textures
    return map_layer_classes(textures, analysis.thickness, thickness)


def soil_info(soil) -> SoilInfo:
    """Summary of a soil: location, layers, texture and crop lower limits."""
    return SoilInfo(
        name=soil.name,
        soil_type=soil.soil_type,
        latitude=soil.latitude,
        longitude=soil.longitude,
        thickness=list(soil.thickness),
        texture=layer_textures(soil),
        crops=[CropInfo(name=crop.name, ll=list(crop.ll)) for crop in soil.water.crops.values()],
    )
