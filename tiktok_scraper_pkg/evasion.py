"""Evasion profile: launch flags, a synthetic fingerprint and stealth patches.

The patches are plain data (a name and a JavaScript body) handed to
Playwright as init scripts. They do not interact with the rest of the
package and are installed once, before the first page is created.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from browserforge.fingerprints import Fingerprint, FingerprintGenerator, Screen
from browserforge.headers import Browser

from .config import LOCALE, TIMEZONE_ID, TIMEZONE_OFFSET_MINUTES, launch_flags
from .models import ScrapeConfig

logger = logging.getLogger(__name__)

DEFAULT_WEBGL_VENDOR = "Google Inc. (NVIDIA)"
DEFAULT_WEBGL_RENDERER = "ANGLE (NVIDIA GeForce RTX 3080 Direct3D11 vs_5_0 ps_5_0)"
PDF_PLUGINS = [
    {"name": "Chrome PDF Viewer", "filename": "internal-pdf-viewer"},
    {"name": "Chromium PDF Viewer", "filename": "internal-pdf-viewer"},
    {"name": "Microsoft Edge PDF Viewer", "filename": "internal-pdf-viewer"},
]


@dataclass(frozen=True)
class EvasionPatch:
    name: str
    script: str


@dataclass
class EvasionProfile:
    launch_args: List[str]
    fingerprint: Any
    user_agent: str
    locale: str
    timezone_id: str
    patches: Tuple[EvasionPatch, ...] = field(default_factory=tuple)


def generate_fingerprint(width: int, height: int) -> Fingerprint:
    """Generate a desktop Windows Chrome fingerprint pinned to the viewport.

    `strict=False` lets browserforge relax the screen constraint instead of
    failing when its dataset has no exact match.
    """
    generator = FingerprintGenerator(
        browser=[Browser(name="chrome", min_version=100)],
        os="windows",
        device="desktop",
        locale=LOCALE,
        strict=False,
    )
    return generator.generate(
        screen=Screen(min_width=width, max_width=width, min_height=height, max_height=height),
    )


def _navigator_language(fingerprint) -> str:
    navigator = getattr(fingerprint, "navigator", None)
    return getattr(navigator, "language", None) or LOCALE


def _webgl_strings(fingerprint) -> Tuple[str, str]:
    card = getattr(fingerprint, "videoCard", None)
    vendor = getattr(card, "vendor", None) or DEFAULT_WEBGL_VENDOR
    renderer = getattr(card, "renderer", None) or DEFAULT_WEBGL_RENDERER
    return vendor, renderer


def build_launch_args(config: ScrapeConfig, language: str) -> List[str]:
    args = launch_flags()
    args.append(f"--window-size={config.viewport.width},{config.viewport.height}")
    args.append(f"--lang={language}")
    return args


def stealth_patches(
    language: str = LOCALE,
    webgl_vendor: str = DEFAULT_WEBGL_VENDOR,
    webgl_renderer: str = DEFAULT_WEBGL_RENDERER,
    timezone_offset: int = TIMEZONE_OFFSET_MINUTES,
) -> Tuple[EvasionPatch, ...]:
    """Return the init-script overrides that hide common automation signals.

    Values are embedded with `json.dumps` so every literal is valid JS.
    """
    languages = [language]
    base = language.split("-")[0]
    if base != language:
        languages.append(base)

    return (
        EvasionPatch(
            "webdriver",
            "Object.defineProperty(navigator, 'webdriver', { get: () => false });",
        ),
        EvasionPatch(
            "plugins",
            "Object.defineProperty(navigator, 'plugins', { get: () => %s });"
            % json.dumps(PDF_PLUGINS),
        ),
        EvasionPatch(
            "languages",
            "Object.defineProperty(navigator, 'languages', { get: () => %s });"
            % json.dumps(languages),
        ),
        EvasionPatch(
            "webgl",
            """
            (() => {
              const getParameter = WebGLRenderingContext.prototype.getParameter;
              WebGLRenderingContext.prototype.getParameter = function (parameter) {
                if (parameter === 37445) return %s;
                if (parameter === 37446) return %s;
                return getParameter.call(this, parameter);
              };
            })();
            """ % (json.dumps(webgl_vendor), json.dumps(webgl_renderer)),
        ),
        EvasionPatch(
            "timezone",
            "Date.prototype.getTimezoneOffset = function () { return %d; };" % timezone_offset,
        ),
        EvasionPatch(
            "permissions",
            """
            (() => {
              const originalQuery = navigator.permissions.query.bind(navigator.permissions);
              navigator.permissions.query = (parameters) => (
                parameters && parameters.name === 'notifications'
                  ? Promise.resolve({
                      state: Notification.permission,
                      onchange: null,
                      addEventListener: () => {},
                      removeEventListener: () => {},
                      dispatchEvent: () => true,
                    })
                  : originalQuery(parameters)
              );
            })();
            """,
        ),
        EvasionPatch(
            "chrome_runtime",
            """
            window.chrome = {
              runtime: {
                sendMessage: () => Promise.resolve({}),
                connect: () => ({ onMessage: { addListener: () => {} } }),
              },
            };
            """,
        ),
    )


def build_evasion_profile(config: ScrapeConfig, fingerprint: Optional[Any] = None) -> EvasionProfile:
    """Assemble the full evasion profile for a run.

    A fingerprint can be passed in to reuse one across runs; otherwise a
    fresh one is generated for the configured viewport.
    """
    if fingerprint is None:
        fingerprint = generate_fingerprint(config.viewport.width, config.viewport.height)

    language = _navigator_language(fingerprint)
    vendor, renderer = _webgl_strings(fingerprint)
    user_agent = fingerprint.navigator.userAgent
    logger.info("Fingerprint: %s (%s)", user_agent, renderer[:60])

    return EvasionProfile(
        launch_args=build_launch_args(config, language),
        fingerprint=fingerprint,
        user_agent=user_agent,
        locale=language,
        timezone_id=TIMEZONE_ID,
        patches=stealth_patches(language, vendor, renderer),
    )
