"""
tactics/schemas.py: request payloads

Each write endpoint parses its JSON body into one of these models. A
pydantic ValidationError is turned into a 400 with the list of field
violations by the error handler in tactics/errors.py.

Fields that are Optional with a None default on the *Update models mean
"keep the stored value when omitted". Where an explicit null means
something (un-equip, unlimited uses), routes check model_fields_set.
"""

from typing import Annotated, Dict, List, Literal, Optional, Union
from urllib.parse import urlparse

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator, model_validator

Number = Union[int, float]
TileRef = Union[int, str]
TileGrid = List[List[Optional[TileRef]]]

STRUCTURED_STATS_KEYS = {
    'base_stats', 'growths', 'bonus_stats', 'weapon_ranks',
    'baseStats', 'bonusStats', 'weaponRanks',
}


def _check_image_url(value):
    if value is None:
        return value
    parsed = urlparse(value)
    if parsed.scheme == 'data' and value.startswith('data:image/'):
        return value
    if parsed.scheme in ('http', 'https') and parsed.netloc:
        return value
    raise ValueError('must be an http(s) URL or an image data URL')


ImageUrl = Annotated[str, AfterValidator(_check_image_url)]


class Payload(BaseModel):
    model_config = ConfigDict(extra='ignore', str_strip_whitespace=True)


# ── Auth ──────────────────────────────────────────────────────────────────────

EMAIL_PATTERN = r'^[^@\s]+@[^@\s]+\.[^@\s]+$'


class RegisterPayload(Payload):
    email: str = Field(pattern=EMAIL_PATTERN, max_length=256)
    password: str = Field(min_length=6)
    display_name: str = Field(min_length=2, max_length=120)

    @field_validator('email')
    @classmethod
    def lower_email(cls, value):
        return value.lower()


class LoginPayload(Payload):
    email: str = Field(pattern=EMAIL_PATTERN)
    password: str = Field(min_length=6)

    @field_validator('email')
    @classmethod
    def lower_email(cls, value):
        return value.lower()


# ── Campaigns ─────────────────────────────────────────────────────────────────

class CampaignPayload(Payload):
    name: str = Field(min_length=2, max_length=200)


class MemberPayload(Payload):
    email: str = Field(pattern=EMAIL_PATTERN)
    role: Literal['DM', 'PLAYER'] = 'PLAYER'

    @field_validator('email')
    @classmethod
    def lower_email(cls, value):
        return value.lower()


# ── Characters ────────────────────────────────────────────────────────────────

class CharacterStats(BaseModel):
    """Character stats in their stored, structured form.

    Two shapes arrive from clients and importers: a flat {"hp": 20, "str": 7}
    map, or the structured {baseStats, growths, bonusStats, weaponRanks}
    object (camelCase or snake_case). A flat map is read as base stats.
    """
    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    base_stats: Dict[str, Number] = Field(default_factory=dict, alias='baseStats')
    growths: Dict[str, Number] = Field(default_factory=dict)
    bonus_stats: Dict[str, Number] = Field(default_factory=dict, alias='bonusStats')
    weapon_ranks: Dict[str, str] = Field(default_factory=dict, alias='weaponRanks')

    @model_validator(mode='before')
    @classmethod
    def accept_flat_map(cls, data):
        if isinstance(data, dict) and not (set(data) & STRUCTURED_STATS_KEYS):
            return {'base_stats': data}
        return data

    def base_hp(self):
        """The declared base HP, whatever the key's case; 0 when absent."""
        for key, value in self.base_stats.items():
            if key.lower() == 'hp':
                return int(value)
        return 0

    def to_storage(self):
        return self.model_dump(by_alias=False)


class WeaponSkill(Payload):
    weapon: str = Field(min_length=1)
    rank: str = Field(min_length=1)


class CharacterPayload(Payload):
    name: str = Field(min_length=2, max_length=200)
    stats: CharacterStats = Field(default_factory=CharacterStats)
    kind: Literal['PLAYER', 'NPC', 'ENEMY'] = 'PLAYER'
    owner_id: Optional[int] = None
    class_name: Optional[str] = None
    level: int = Field(default=1, ge=1)
    exp: int = Field(default=0, ge=0)
    current_hp: Optional[int] = Field(default=None, ge=0)
    weapon_skills: List[WeaponSkill] = Field(default_factory=list)


class CharacterUpdatePayload(Payload):
    name: Optional[str] = Field(default=None, min_length=2, max_length=200)
    stats: Optional[CharacterStats] = None
    kind: Optional[Literal['PLAYER', 'NPC', 'ENEMY']] = None
    owner_id: Optional[int] = None
    class_name: Optional[str] = None
    level: Optional[int] = Field(default=None, ge=1)
    exp: Optional[int] = Field(default=None, ge=0)
    current_hp: Optional[int] = Field(default=None, ge=0)
    weapon_skills: Optional[List[WeaponSkill]] = None


class HpPayload(Payload):
    current_hp: int = Field(ge=0)


class SkillLinkPayload(Payload):
    skill_id: int


# ── Inventory ─────────────────────────────────────────────────────────────────

class InventoryAddPayload(Payload):
    item_id: int
    uses: Optional[int] = Field(default=None, ge=0)
    blessed: bool = False


class InventoryUpdatePayload(Payload):
    uses: Optional[int] = Field(default=None, ge=0)
    blessed: Optional[bool] = None


class InventoryOrderPayload(Payload):
    ids: List[int]


class EquipPayload(Payload):
    # Required, but may be null: null un-equips
    character_item_id: Optional[int]


# ── Maps ──────────────────────────────────────────────────────────────────────

class MapPayload(Payload):
    name: str = Field(min_length=2, max_length=200)
    image_url: Optional[ImageUrl] = None
    tile_count_x: int = Field(default=10, ge=5, le=200)
    tile_count_y: int = Field(default=10, ge=5, le=200)
    tile_grid: Optional[TileGrid] = None
    grid_size_x: int = Field(default=50, ge=10, le=200)
    grid_size_y: int = Field(default=50, ge=10, le=200)
    grid_offset_x: int = 0
    grid_offset_y: int = 0

    @model_validator(mode='after')
    def needs_background(self):
        if not self.image_url and self.tile_grid is None:
            raise ValueError('Map requires image_url or tile_grid')
        return self


class MapUpdatePayload(Payload):
    name: Optional[str] = Field(default=None, min_length=2, max_length=200)
    image_url: Optional[ImageUrl] = None
    tile_count_x: Optional[int] = Field(default=None, ge=5, le=200)
    tile_count_y: Optional[int] = Field(default=None, ge=5, le=200)
    tile_grid: Optional[TileGrid] = None
    grid_size_x: Optional[int] = Field(default=None, ge=10, le=200)
    grid_size_y: Optional[int] = Field(default=None, ge=10, le=200)
    grid_offset_x: Optional[int] = None
    grid_offset_y: Optional[int] = None


class RollPayload(Payload):
    type: Literal['REGULAR', 'COMBAT']


# ── Tokens ────────────────────────────────────────────────────────────────────

class TokenPayload(Payload):
    label: str = Field(min_length=1, max_length=100)
    x: int = Field(ge=0)
    y: int = Field(ge=0)
    color: Optional[str] = Field(default=None, max_length=20)
    character_id: int


class TokenUpdatePayload(Payload):
    label: Optional[str] = Field(default=None, min_length=1, max_length=100)
    x: Optional[int] = Field(default=None, ge=0)
    y: Optional[int] = Field(default=None, ge=0)
    color: Optional[str] = Field(default=None, max_length=20)
    character_id: Optional[int] = None


class TokenMovePayload(Payload):
    map_id: int
    token_id: int
    x: int = Field(ge=0)
    y: int = Field(ge=0)


# ── Tilesets and presets ──────────────────────────────────────────────────────

class TilePayload(Payload):
    index: int = Field(ge=0)
    image_url: ImageUrl


class TileSetPayload(Payload):
    name: str = Field(min_length=2, max_length=200)
    image_url: ImageUrl
    tile_size_x: int = Field(ge=8, le=256)
    tile_size_y: int = Field(ge=8, le=256)
    columns: int = Field(ge=1, le=512)
    rows: int = Field(ge=1, le=512)
    tiles: Optional[List[TilePayload]] = None


class TileSetUploadPayload(Payload):
    """Form fields that accompany an uploaded sheet. Values arrive as strings."""
    name: str = Field(min_length=2, max_length=200)
    tile_size_x: int = Field(ge=8, le=256)
    tile_size_y: int = Field(ge=8, le=256)
    columns: int = Field(ge=1, le=512)
    rows: int = Field(ge=1, le=512)


class PresetPayload(Payload):
    name: str = Field(min_length=2, max_length=200)
    tile_count_x: int = Field(ge=5, le=200)
    tile_count_y: int = Field(ge=5, le=200)
    tile_grid: Optional[TileGrid] = None


class PresetUpdatePayload(Payload):
    name: Optional[str] = Field(default=None, min_length=2, max_length=200)
    tile_count_x: Optional[int] = Field(default=None, ge=5, le=200)
    tile_count_y: Optional[int] = Field(default=None, ge=5, le=200)
    tile_grid: Optional[TileGrid] = None
