"""Ordered EMDN classification rules for orthopaedic products.

Order is significant: the first rule whose excludes do not fire and whose
includes do fire wins. Within each body area the most specific codes come
first; broad fallbacks sit at the very end.
"""
from dataclasses import dataclass
from typing import Iterable, Tuple, Union

from emdn_matching.services.classification.patterns import PatternMatcher, compile_pattern


@dataclass(frozen=True)
class CategoryRule:
    """A classification rule.

    Attributes:
        name: Human-readable rule name used in reports
        target_code: Category code assigned when the rule fires
        include_patterns: Non-empty; any match makes the rule fire
        exclude_patterns: Any match skips the whole rule
    """
    name: str
    target_code: str
    include_patterns: Tuple[PatternMatcher, ...]
    exclude_patterns: Tuple[PatternMatcher, ...] = ()

    def is_excluded(self, text: str) -> bool:
        return any(p.matches(text) for p in self.exclude_patterns)

    def first_include_match(self, text: str):
        """Return the first include pattern matching ``text`` or None."""
        for pattern in self.include_patterns:
            if pattern.matches(text):
                return pattern
        return None


def rule(
    name: str,
    code: str,
    patterns: Iterable[Union[str, PatternMatcher]],
    exclude: Iterable[Union[str, PatternMatcher]] = (),
) -> CategoryRule:
    """Build a CategoryRule from regex strings."""
    return CategoryRule(
        name=name,
        target_code=code,
        include_patterns=tuple(compile_pattern(p) for p in patterns),
        exclude_patterns=tuple(compile_pattern(p) for p in exclude),
    )


DEFAULT_RULES: Tuple[CategoryRule, ...] = (
    # ======================================================================
    # INSTRUMENTS & EQUIPMENT (separate category tree, checked first)
    # ======================================================================
    rule("Instrument - Drill bits", "P091303",
         [r"\bdrill\b", r"drill\s*bit", r"\bdrl\b.*bit", r"rnglc.*drl"],
         exclude=[r"drill\s*guide"]),
    rule("Instrument - Reamers", "P091301",
         [r"\breamer\b", r"\breaming\b"]),
    rule("Instrument - Blades / Saws", "P091302",
         [r"saw\s*blade", r"oscillat.*blade", r"\bosc\b.*\d+x\d+",
          r"acc3ti\s*osc", r"recip.*saw", r"recip.*blade", r"sagittal.*blade",
          r"\brecip\b", r"\brcp\b.*dbl", r"\brec\b.*ds",
          r"zim\s+(ds|ss)\s+recip", r"univ\s+recip\s+keel"],
         exclude=[r"implant", r"prosthe", r"stem", r"cup", r"liner", r"insert"]),
    rule("Instrument - Other (batteries, robotic, navigators)", "P091399",
         [r"\bbattery\b", r"\bcharger\b", r"\bpower\s*cord\b",
          r"\bnavitrack", r"\brosa\s+robotic", r"\bdrape\s*box",
          r"aseptic.*transfer", r"\bfunnel\b.*battery",
          r"\bhood\b.*vivi", r"vivi\s+hood"]),
    rule("Instrument - Wire drivers / handpieces", "P091399",
         [r"\bdrvr\b", r"wire\s*driver", r"handpiece", r"trigger.*pin"]),

    # ======================================================================
    # BONE CEMENT
    # ======================================================================
    rule("Bone cement", "P099001",
         [r"bone\s*cem(ent|t)?\b", r"\bcmt\b.*\d+x\d+", r"\bcem\b.*\d+x\d+",
          r"copal", r"palacos", r"simplex", r"refobacin", r"hi-fatigue"],
         exclude=[r"cemented", r"cem\.", r"cement.*cup", r"cement.*stem"]),
    rule("Cement equipment", "P099002",
         [r"optivac", r"palajet", r"palamix", r"palavage",
          r"cement.*mix", r"vac.*bowl", r"\bnozzle\b", r"pulsavac", r"puls\s*plus"]),

    # ======================================================================
    # OSTEOSYNTHESIS
    # ======================================================================
    rule("Cerclage", "P09120302", [r"cerclage"]),
    rule("Bone wires / K-wires", "P09120301",
         [r"fix.*pin", r"\bpin\b.*\d+.*mm", r"bone\s*pin"],
         exclude=[r"hip", r"knee"]),
    rule("Cancellous screws", "P09120602",
         [r"cancellous.*screw", r"cancell.*scr", r"spongiosa.*screw"]),
    rule("Hip - Trilogy/acetabular fixing screws", "P09088007",
         [r"trilogy\s+bone\s+scr"]),
    rule("Cortical / bone screws", "P09120601",
         [r"bone\s*screw", r"cortical.*screw", r"self.*tapping.*screw",
          r"\bscr\b.*\d+\.\d+", r"\bscr\b.*\d+mm", r"hdegd.*scr"],
         exclude=[r"hip", r"acetabular", r"cup", r"knee", r"tibial",
                  r"shoulder", r"cancell", r"trilogy"]),

    # ======================================================================
    # ELBOW
    # ======================================================================
    rule("Elbow - humeral", "P090203", [r"elbow.*humer"]),
    rule("Elbow - ulnar", "P090205", [r"elbow.*ulna"]),
    rule("Elbow - radial", "P090204", [r"elbow.*radi"]),
    rule("Elbow - general", "P0902", [r"\belbow\b"]),

    # ======================================================================
    # SHOULDER
    # ======================================================================
    rule("Shoulder - Metaglene / glenoid baseplates", "P09010301",
         [r"metaglene", r"glenoid.*baseplate", r"baseplate.*glenoid"]),
    rule("Shoulder - Glenospheres", "P09010303", [r"glenosphere"]),
    rule("Shoulder - Monoblock glenoids", "P09010304",
         [r"monoblock.*glenoid", r"glenoid.*monoblock"]),
    rule("Shoulder - Anatomical glenoid inserts", "P09010302",
         [r"glenoid.*insert", r"insert.*glenoid", r"anatomical.*glenoid"]),
    rule("Shoulder - Glenoid (general)", "P090103", [r"glenoid"]),
    rule("Shoulder - Reverse prostheses inserts/liners", "P090104010201",
         [r"smr.*reverse\s+liner", r"smr.*reverse\s+hp.*liner",
          r"smr.*reverse\s+hp\s+lateraliz"]),
    rule("Shoulder - Revision stems", "P0901040204",
         [r"smr\s+system.*cemented\s+revision\s+stem",
          r"smr\s+system.*cementless\s*revision\s+stem"]),
    rule("Shoulder - Cemented stems", "P0901040201",
         [r"smr\s+system.*cemented\s+stem"],
         exclude=[r"revision"]),
    rule("Shoulder - Anatomical humeral heads", "P090104010101",
         [r"smr\s+system.*humeral\s+head", r"cta\s+humeral\s+head",
          r"shoulder.*humeral\s+head", r"humeral\s+head\s+dia"],
         exclude=[r"reverse", r"elbow"]),
    rule("Shoulder - Reverse humeral cups", "P090104010202",
         [r"reverse.*humeral\s+body", r"ha\s+coated\s+reverse.*humeral",
          r"finned\s+reverse.*humeral", r"cta.*adaptor.*reverse"]),
    rule("Shoulder - CTA heads adaptor", "P09018002",
         [r"cta.*heads\s+adaptor", r"cta.*36.*adaptor"],
         exclude=[r"reverse"]),
    rule("Shoulder - Finned humeral body (stem)", "P0901040201",
         [r"finned\s+humeral\s+body", r"humeral\s+body.*locking"],
         exclude=[r"reverse"]),
    rule("Shoulder - Modular stems", "P0901040202",
         [r"smr\s+shoulder.*cementless\s+finned\s+stem",
          r"shoulder.*finned\s+stem", r"shoulder.*cementless.*stem"]),
    rule("Shoulder - Large resection stems", "P0901040205",
         [r"smr.*large\s+resection\s+stem", r"shoulder.*large.*resection"]),
    rule("Shoulder - Stemless core", "P090199",
         [r"smr\s+stemless.*stemless\s+core", r"stemless.*core"]),
    rule("Shoulder - Stemless adaptor/screw", "P09018099",
         [r"smr\s+stemless.*adaptor", r"stemless.*adaptor",
          r"smr\s+stemless.*screw", r"stemless.*adaptor\s+screw"]),
    rule("Shoulder - Fixing screws", "P09018001",
         [r"shoulder.*screw", r"glenoid.*screw"]),
    rule("Shoulder - General", "P0901",
         [r"\bshoulder\b", r"\bsmr\b", r"reverse.*shoulder", r"\bhumeral\b", r"\bcta\b"],
         exclude=[r"elbow", r"hip", r"knee"]),

    # ======================================================================
    # HIP
    # ======================================================================
    # Acetabular inserts
    rule("Hip - Ceramic acetabular inserts", "P0908030402",
         [r"ceramic.*liner", r"ceramic.*insert.*acetab", r"biolox.*liner", r"biolox.*insert"],
         exclude=[r"knee"]),
    rule("Hip - Metal acetabular inserts", "P0908030403",
         [r"metal.*liner.*acetab", r"metal.*insert.*acetab"],
         exclude=[r"knee"]),
    rule("Hip - Retentive PE inserts (anti-dislocation)", "P090803040103",
         [r"constrained.*liner", r"liner.*constrained",
          r"retentive.*liner", r"anti.*disloc.*liner"],
         exclude=[r"knee"]),
    rule("Hip - Eccentric PE inserts", "P090803040102",
         [r"eccentric.*liner", r"liner.*eccentric", r"elevated.*liner",
          r"liner.*elevated", r"liner.*elev\b"],
         exclude=[r"knee"]),
    rule("Hip - Standard PE inserts", "P090803040101",
         [r"\bliner\b.*neutral", r"neutral.*liner", r"standard.*liner"],
         exclude=[r"knee", r"tibial"]),
    rule("Hip - PE acetabular inserts (general)", "P0908030401",
         [r"hip.*liner", r"hip.*insert", r"acetabular.*(liner|insert)",
          r"(liner|insert).*acetabul", r"pe\s*liner", r"polyethylene.*liner",
          r"durasul", r"longevity", r"e1.*liner", r"xlpe.*liner",
          r"\bliner\b.*\d+.*mm", r"low.*profile.*liner",
          r"\bzca\b", r"ringloc", r"rloc-x", r"arcomxl",
          r"allofit.*liner", r"plasmacup.*liner", r"dural.*insert"],
         exclude=[r"ceramic", r"tibial", r"knee", r"\btib\b"]),

    # Dual mobility
    rule("Hip - Uncemented dual-mobility cups", "P090803050102",
         [r"dual.*mobility.*uncement", r"uncement.*dual.*mobility"]),
    rule("Hip - Cemented dual-mobility cups", "P090803050101",
         [r"dual.*mobility.*cement", r"cement.*dual.*mobility"],
         exclude=[r"uncement"]),
    rule("Hip - Dual-mobility cups (general)", "P0908030501",
         [r"dual.*mobility", r"double.*mobility", r"\bmdm\b",
          r"polar.*cup", r"mobility.*cup"]),
    rule("Hip - Dual-mobility inserts", "P0908030502",
         [r"dual.*mobility.*insert", r"double.*mobility.*insert"]),

    # Acetabular cups
    rule("Hip - Cemented PE acetabular cups", "P090803010102",
         [r"durasul.*low\s*profile\s*cup", r"low\s*profile\s*cup.*\d+",
          r"cup.*pe.*cem", r"\bpe\b.*cup.*cem",
          r"acetabular.*cup.*cem.*pe", r"ccb.*cup.*pe"],
         exclude=[r"uncement", r"shell"]),
    rule("Hip - Cemented acetabular cups (general)", "P0908030101",
         [r"cup.*cemented", r"cemented.*cup", r"acetabular.*cup.*cem",
          r"\bcup\b.*\bcem\b"],
         exclude=[r"uncement", r"\bpe\b", r"shell"]),
    rule("Hip - Uncemented metal acetabular cups/shells", "P090803010201",
         [r"\bshell\b", r"allofit", r"plasmacup", r"trident", r"pinnacle",
          r"\bg7\b", r"trilogy", r"continuum", r"regenerex", r"r3\s*shell",
          r"acetabular.*shell", r"press.*fit.*cup", r"delta.*cup",
          r"multihole.*cup", r"cluster.*cup", r"\btt\s*cup",
          r"trabecular.*metal.*(cup|shell)"],
         exclude=[r"liner", r"insert", r"screw", r"knee", r"elbow", r"shoulder"]),
    rule("Hip - Revision acetabular cups", "P09080303",
         [r"revision.*acetabul", r"acetabul.*revision", r"revision.*cup"]),
    rule("Hip - Pre-assembled acetabular (cup + insert)", "P09080306",
         [r"pre.*assembled.*acetab", r"acetab.*pre.*assembled"]),

    # Femoral heads
    rule("Hip - Ceramic heads, total hip", "P090804050201",
         [r"ceramic.*head", r"ceramic.*fem.*head", r"head.*ceramic",
          r"biolox", r"biolx", r"\bcer\b.*\bhd\b",
          r"delta.*cer.*hd", r"delta.*cer.*fm",
          r"hip\s+head\s+ceramys", r"ceramys"],
         exclude=[r"partial", r"hemi"]),
    rule("Hip - Metal heads, total hip", "P090804050202",
         [r"femoral.*head(?!.*ceramic)", r"fem.*head(?!.*ceramic)",
          r"cocr.*head", r"\bcocr\b.*\bhd\b", r"\bzb\b.*cocr.*hd",
          r"\bhead\b.*cocr", r"hip\s+head.*\d+"],
         exclude=[r"ceramic", r"\bcer\b", r"ceramys", r"humeral", r"biolox"]),
    rule("Hip - Bi-articular cups (bipolar heads)", "P0908040503",
         [r"bi.?articular", r"bipolar.*head", r"bipolar.*cup"]),
    rule("Hip - Revision femoral heads", "P0908040504",
         [r"revision.*femoral\s+head", r"revision.*head"],
         exclude=[r"cup", r"stem", r"knee"]),
    rule("Hip - Femoral heads (fallback)", "P09080405",
         [r"\bhead\b.*\d+.*mm", r"\bhead\b.*\d+x\d+"],
         exclude=[r"elbow", r"knee", r"shoulder", r"humeral", r"screw"]),

    # Femoral stems, cemented
    rule("Hip - Cemented stems, fixed neck, straight", "P090804010101",
         [r"cemented.*stem.*straight", r"straight.*cemented.*stem"],
         exclude=[r"uncement", r"modular.*neck", r"shoulder", r"elbow"]),
    rule("Hip - Cemented stems, fixed neck, anatomical", "P090804010102",
         [r"cemented.*stem.*anatomic", r"anatomic.*cemented.*stem"],
         exclude=[r"uncement", r"modular.*neck", r"shoulder", r"elbow"]),
    rule("Hip - Cemented femoral stems (general)", "P0908040101",
         [r"stem.*cemented", r"stem.*cem\b", r"cemented.*stem",
          r"m[üu]ller.*stem", r"muller.*stem", r"logica.*stem.*mirror",
          r"logica.*stem.*centralizer", r"stem\s+ms-30.*polished",
          r"cl\s+trauma.*hip.*stem"],
         exclude=[r"uncement", r"cementless", r"elbow", r"shoulder", r"knee", r"tibial"]),

    # Femoral stems, uncemented
    rule("Hip - Uncemented stems, fixed neck, straight", "P090804010201",
         [r"uncemented.*stem.*straight", r"cementless.*stem.*straight"],
         exclude=[r"modular.*neck", r"shoulder", r"elbow"]),
    rule("Hip - Uncemented stems, preservation (short)", "P090804010205",
         [r"friendly\s+short\s+hip.*stem", r"minima.*hip.*stem.*cementless"]),
    rule("Hip - Uncemented femoral stems (general)", "P0908040102",
         [r"uncemented.*stem", r"cementless.*stem", r"press.*fit.*stem",
          r"porous.*stem", r"avenir.*cmpl", r"avenir.*ha",
          r"cls\s+(spotorno\s+)?stem", r"friendly\s+hip.*stem",
          r"h-max\s+(c|s)\s+hip.*stem", r"minima.*hip.*stem"],
         exclude=[r"elbow", r"shoulder", r"knee", r"tibial", r"logica",
                  r"cl\s+trauma", r"ms-30"]),

    # Femoral stems, other
    rule("Hip - Revision femoral stems", "P09080403",
         [r"revision.*stem", r"stem.*revision", r"revision.*femoral",
          r"revitan", r"mp\s*revision", r"modulus-?r\s+hip.*stem"],
         exclude=[r"elbow", r"knee"]),
    rule("Hip - Modular revision stems (MODULUS)", "P09080403",
         [r"modulus\s+hip.*modular\s+stem"],
         exclude=[r"knee"]),
    rule("Hip - Resurfacing femoral", "P09080402",
         [r"resurfac.*femoral", r"femoral.*resurfac", r"hip.*resurfac"]),
    rule("Hip - Large resection femoral stems", "P09080404",
         [r"large\s*resection.*stem.*hip", r"hip.*large.*resection.*stem"],
         exclude=[r"shoulder"]),
    rule("Hip - Modular necks", "P09080407",
         [r"modular.*neck", r"neck.*modular", r"femoral.*neck",
          r"micro\s*taper", r"micro\s*tloc", r"taper.*neck",
          r"\btprlc\b", r"\btaprlc\b", r"\btprloc\b", r"\btaperloc\b", r"\btloc\b",
          r"\btaper\s*plug\b"],
         exclude=[r"knee"]),
    rule("Hip - One-piece femoral (stem+head)", "P09080406",
         [r"one.*piece.*femoral", r"stem.*head.*mono"]),
    rule("Hip - Primary femoral stems (generic)", "P09080401",
         [r"stem\s+implant\s+\d+mm", r"offset\s+stem\s+\d+mm", r"\bstem\b.*\d+mm.*\d+mm"],
         exclude=[r"knee", r"tibial", r"shoulder", r"elbow", r"spine"]),

    # Accessories
    rule("Hip - Acetabular rings", "P09088001",
         [r"reinforc.*ring", r"b-s\s+reinforc", r"anti.*protrusio", r"acetabular.*ring"]),
    rule("Hip - Augments", "P09088003",
         [r"hip.*augment", r"augment.*hip", r"acetabul.*augment",
          r"augment.*acetabul", r"buttress", r"flying\s*buttress",
          r"\bprc\b.*agmt", r"\bagmt\b.*block",
          r"acetabul.*cone", r"trabecular.*cone", r"acetabul.*wedge"],
         exclude=[r"knee", r"tibial"]),
    rule("Hip - Fixing screws", "P09088007",
         [r"hip.*screw", r"acetabular.*screw", r"cup.*screw", r"shell.*screw"],
         exclude=[r"knee", r"tibial"]),
    rule("Hip - Centralizers", "P09088005",
         [r"hip.*centrali[sz]er", r"centrali[sz]er.*hip",
          r"stem.*centrali[sz]er", r"distal\s+centrali[sz]er",
          r"centering\s+plug", r"prox.*centrali[sz]er",
          r"friendly.*centrali[sz]er", r"friendly.*plug.*centrali[sz]er",
          r"friendly.*centering"],
         exclude=[r"knee"]),
    rule("Hip - Intramedullary caps", "P09088006",
         [r"intramedullary.*cap", r"femoral.*cap", r"distal.*hood"]),
    rule("Hip - Plugs (cement restrictors)", "P090880",
         [r"cement\s*plug", r"cement\s*restrictor", r"femoral.*plug",
          r"medullary.*plug", r"\bplug\b.*dia", r"friendly.*plug.*hood"],
         exclude=[r"knee", r"tibial"]),
    rule("Hip - Spacers", "P090805",
         [r"hip.*spacer", r"spacer.*hip", r"prostalac"]),
    rule("Hip - Accessories (general)", "P090880",
         [r"hip.*adapt", r"adapt.*hip", r"modular.*adapt",
          r"taper.*adapt", r"neck.*adapt"],
         exclude=[r"knee", r"tibial"]),

    # ======================================================================
    # KNEE
    # ======================================================================
    # Unicompartmental
    rule("Knee - Unicompartmental monoblock tibial (PE)", "P090904020401",
         [r"physica\s+zuk.*all-poly\s+tibial", r"unicompartmental.*all-poly\s+tibial"]),
    rule("Knee - Unicompartmental cemented tibial plates (Physica ZUK)", "P090904020103",
         [r"physica\s+zuk.*tibial\s+component\s+precoat"]),
    rule("Knee - Unicompartmental mobile bearing inserts", "P090904020201",
         [r"oxf\s+anat\s+brg", r"oxford.*bearing", r"unicompartmental.*mobile.*insert"]),
    rule("Knee - Unicompartmental cemented femoral", "P0909040101",
         [r"oxford.*cemented\s+fem", r"oxf.*twin.*peg.*fem",
          r"unicompartmental.*cemented.*fem"]),
    rule("Knee - Unicompartmental cementless femoral", "P0909040102",
         [r"oxford.*cementless\s+fem", r"unicompartmental.*cementless.*fem"]),
    rule("Knee - Unicompartmental femoral (general)", "P09090401",
         [r"oxf.*fem", r"physica\s+zuk.*fem", r"unicompartmental.*fem"],
         exclude=[r"tibial", r"insert", r"bearing"]),
    rule("Knee - Unicompartmental cementless tibial plates", "P090904020104",
         [r"oxf\s+uni\s+cmntls\s+tib", r"oxford.*cementless.*tib.*tray"]),
    rule("Knee - Unicompartmental cemented tibial plates", "P090904020103",
         [r"oxf\s+uni\s+tib\s+tray", r"oxford.*cemented.*tib.*tray"]),
    rule("Knee - Unicompartmental tibial plates (general)", "P0909040201",
         [r"physica\s+zuk.*tibial\s+plate", r"unicompartmental.*tibial\s+plate"]),
    rule("Knee - Unicompartmental fixed tibial inserts", "P090904020202",
         [r"physica\s+zuk.*articular.*surface", r"physica\s+zuk.*insert",
          r"unicompartmental.*fixed.*insert"]),
    rule("Knee - Unicompartmental (general)", "P090904",
         [r"\boxf\b", r"oxford", r"unicompartmental", r"unicondylar", r"physica\s+zuk"]),

    # Revision
    rule("Knee - Revision femoral components (LCCK)", "P09090501",
         [r"lcck\s+fem\s+implant", r"lcck.*femoral", r"revision.*knee.*femoral"]),
    rule("Knee - Revision mobile bearing tibial inserts", "P090905020201",
         [r"revision.*mobile.*tibial.*insert"]),
    rule("Knee - Revision fixed bearing tibial inserts", "P090905020202",
         [r"lcck\s+art\s+surf", r"ng\s+lcck\s+art\s+s[uf]",
          r"revision.*fixed.*tibial.*insert"]),
    rule("Knee - Revision fixed bearing tibial plates", "P090905020102",
         [r"ng\s+rot.*hinge.*tib\s+plt", r"rotating.*hinge.*tibial"]),
    rule("Knee - Revision (general)", "P090905",
         [r"knee.*revision", r"revision.*knee", r"\blcck\b",
          r"constrained.*condylar", r"legacy.*constrained"]),

    # Accessories
    rule("Knee - Adapters/Cones/Sleeves", "P09098002",
         [r"knee.*cone", r"tibial.*cone", r"femoral.*cone.*knee",
          r"knee.*sleeve", r"tibial.*sleeve", r"femoral.*sleeve",
          r"\bsleeve\b.*\btib\b", r"\bsleeve\b.*\bfem\b",
          r"amf\s+revision.*cone"]),
    rule("Knee - Augments", "P09098001",
         [r"knee.*augment", r"tibial.*augment", r"femoral.*augment",
          r"\baug\b.*\d+.*mm", r"augment.*\btib\b", r"augment.*\bfem\b",
          r"block.*augment", r"wedge.*augment",
          r"prc\s+tib\s+block", r"full\s+block\s+tib\s+aug",
          r"rhk.*tib\s+aug", r"\d+\s*mm\s+full\s+block\s+tib"]),
    rule("Knee - Tibial stems", "P0909800602",
         [r"tibial.*stem", r"\btib\b.*stem", r"stem.*tibial", r"psn\s+tib\s+stm"]),
    rule("Knee - Femoral stems", "P0909800601",
         [r"femoral.*stem.*knee", r"knee.*femoral.*stem", r"ng\s+flu\s+stem\s+ext"]),
    rule("Knee - Taper stems (Persona)", "P0909800602",
         [r"psn\s+tpr\s+st"]),
    rule("Knee - Plugs/Obturators", "P09098003",
         [r"knee.*plug", r"tibial.*plug", r"\bplug\b.*\btib\b", r"obturator"]),
    rule("Knee - Screws", "P09098099",
         [r"knee.*screw", r"tibial.*screw", r"knee.*offset",
          r"psn.*female\s+scr", r"psn.*\d+mm.*scr"]),

    # Patellar
    rule("Knee - Patellar monoblock", "P0909070201",
         [r"all\s*poly\s*pat\s*comp", r"patellar.*mono",
          r"patellar.*prothesis", r"patellar.*prosthesis"]),
    rule("Knee - Patellar modular", "P0909070202",
         [r"patellar.*modular", r"modular.*patellar", r"patellar.*metal.*back"]),
    rule("Knee - Femoral trochlea resurfacing", "P09090701",
         [r"trochlea", r"pfj\s+fem", r"patello.*femoral.*fem"]),
    rule("Knee - Patellar (general)", "P09090702",
         [r"patella", r"patellar", r"pat\s*comp"]),

    # Bicompartmental femoral
    rule("Knee - Bicompartmental cemented femoral", "P0909030101",
         [r"multigen.*knee.*cemented\s+femoral",
          r"physica\s+(kr|ps).*femoral.*cemented",
          r"cr.*precoat.*fem.*comp", r"psn\s+fem\s+(cr|ps)\s+cmt"]),
    rule("Knee - Bicompartmental femoral (general)", "P09090301",
         [r"physica\s+(kr|ps).*femoral", r"multigen.*knee.*femoral",
          r"multigen.*knee.*cck.*femoral",
          r"art\s+surface.*fem\s+sz", r"fem\s+size\s+[a-h]\s+(left|right)",
          r"lps.*fem.*comp", r"lps-flex.*option.*femoral",
          r"lps-flex.*tivanium.*femoral", r"lps.*option.*femoral",
          r"ng\s+(cr|ps|knee).*fem", r"ng\s+cr-flex.*fem", r"ng\s+knee.*opt.*fem"],
         exclude=[r"hip", r"stem", r"head\b", r"shoulder", r"tibial",
                  r"insert", r"augment", r"sleeve"]),

    # Bicompartmental tibial
    rule("Knee - Bicompartmental cemented fixed bearing tibial plates", "P090903020104",
         [r"multigen.*knee.*h\s+cemented\s+tibial\s+plate",
          r"physica\s+(kr|ps)?\s*knee.*tibial\s+plate\s+cemented",
          r"physica\s+knee.*tibial\s+plate\s+cemented",
          r"ng\s+ps\s+mic.*tib\s+plt", r"st\s+prc\s+tib\s+plt"]),
    rule("Knee - Bicompartmental tibial plates (general)", "P0909030201",
         [r"tibial\s*(base)?plate", r"tibial\s*tray", r"tibial\s*component",
          r"\btib\b.*plate", r"\btib\b.*tray", r"\btib\b.*base"],
         exclude=[r"liner", r"insert", r"stem", r"sleeve", r"augment",
                  r"unicompartmental", r"oxford", r"\boxf\b"]),
    rule("Knee - Bicompartmental fixed bearing tibial inserts", "P090903020202",
         [r"cr\s+art\s+surf", r"lps\s+flex\s+art\s+surf",
          r"lps-flex\s+fxd\s+mld", r"lps\s+flex\s+fxd\s+mld",
          r"psn\s+asf\s+(ps|cr)", r"psn\s+mc\s+ve\s+asf",
          r"multigen.*knee.*insert", r"physica\s+(kr|ps).*insert",
          r"physica\s+(kr|ps).*tibial\s+insert"]),
    rule("Knee - Bicompartmental mobile bearing tibial inserts", "P090903020201",
         [r"mobile.*bearing.*tibial.*insert", r"rotating.*platform.*insert"]),
    rule("Knee - Tibial inserts (general)", "P0909030202",
         [r"tibial.*insert", r"tibial.*liner", r"\btib\b.*insert", r"\btib\b.*liner",
          r"knee.*liner", r"knee.*insert", r"insert.*\btib\b"],
         exclude=[r"hip", r"acetabul"]),
    rule("Knee - Spacers", "P090908", [r"knee.*spacer", r"tibial.*spacer"]),
    rule("Knee - General", "P0909",
         [r"\bknee\b", r"physica\b", r"multigen\b", r"nexgen", r"persona",
          r"\bpsn\b", r"\blps\b", r"\bcck\b"],
         exclude=[r"hip", r"elbow", r"shoulder", r"acetabul"]),

    # ======================================================================
    # SPINE
    # ======================================================================
    rule("Spine - Cages", "P09070101",
         [r"spinal\s+cage", r"interbody.*cage", r"\bcage\b.*spine"]),
    rule("Spine - Disc replacement", "P09070201",
         [r"disc\s+prosthe", r"intervertebral.*disc", r"disc\s+replace"]),
    rule("Spine - Cervical fixation", "P09070301",
         [r"cervical.*fixation", r"cervical.*plate", r"cervical.*screw"]),
    rule("Spine - Thoracolumbar fixation", "P09070302",
         [r"pedicle.*screw", r"thoraco.*lumbar", r"spinal.*rod"]),
    rule("Spine - General", "P0907", [r"\bspine\b", r"\bspinal\b", r"vertebra"]),

    # ======================================================================
    # ANKLE / FOOT
    # ======================================================================
    rule("Ankle - General", "P0905", [r"\bankle\b"]),
    rule("Foot - Interphalangeal", "P090603",
         [r"foot.*interphalang", r"toe.*joint", r"toe.*prosthe"]),
    rule("Foot - Metatarsophalangeal", "P090604",
         [r"metatarso", r"mtp.*joint", r"bunion", r"hallux"]),
    rule("Foot - General", "P0906", [r"\bfoot\b", r"\btoe\b"]),

    # ======================================================================
    # FALLBACKS
    # ======================================================================
    rule("Hip - Acetabular (fallback)", "P090803",
         [r"acetabul", r"\bcup\b"],
         exclude=[r"elbow", r"knee", r"shoulder", r"tibial", r"\btib\b"]),
    rule("Hip - Femoral (fallback)", "P090804",
         [r"femoral", r"femur", r"\bstem\b"],
         exclude=[r"elbow", r"knee", r"shoulder", r"humeral", r"tibial",
                  r"\btib\b", r"physica", r"multigen"]),
    rule("Hip - General (fallback)", "P0908", [r"\bhip\b"]),
    rule("Ortho - General (fallback)", "P09", [r"implant", r"prosthe"]),
)
