from enum import Enum

class ProviderCategory(str, Enum):
    lashes = "Pillás"
    nails = "Körmös"
    womens_hair = "Női fodrász"
    makeup = "Sminkes"
    lip_filler = "Szájfeltöltés"
    mens_hair = "Férfi fodrász"
    laser_hair_removal = "Lézeres szőrtelenítés"
    cosmetician = "Kozmetikus"
    botox = "Botox"
    permanent_makeup = "Sminktetoválás"
    waxing = "Gyanta"
    brow_lash_styling = "Szemöldök szempilla styling"
    hair_extensions = "Hajhosszabítás"
    pedicure = "Pedikür"
    fitness = "Fitness/mozgás"

class MediaKind(str, Enum):
    image = "image"
    video = "video"

class ExportEventKind(str, Enum):
    started = "started"
    progress = "progress"
    error = "error"
    done = "done"

class ExportState(str, Enum):
    idle = "idle"
    fetching = "fetching"
    delivering = "delivering"
    waiting = "waiting"
    done = "done"
    cancelled = "cancelled"
