from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Language:
    code: str
    name: str

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "name": self.name}


LANGUAGES: tuple[Language, ...] = (
    Language("af", "Afrikaans"),
    Language("sq", "Albanian"),
    Language("am", "Amharic"),
    Language("ar", "Arabic"),
    Language("hy", "Armenian"),
    Language("az", "Azerbaijani"),
    Language("eu", "Basque"),
    Language("be", "Belarusian"),
    Language("bn", "Bengali"),
    Language("bs", "Bosnian"),
    Language("bg", "Bulgarian"),
    Language("ca", "Catalan"),
    Language("ceb", "Cebuano"),
    Language("zh", "Chinese (Simplified)"),
    Language("zh-TW", "Chinese (Traditional)"),
    Language("co", "Corsican"),
    Language("hr", "Croatian"),
    Language("cs", "Czech"),
    Language("da", "Danish"),
    Language("nl", "Dutch"),
    Language("en", "English"),
    Language("eo", "Esperanto"),
    Language("et", "Estonian"),
    Language("fi", "Finnish"),
    Language("fr", "French"),
    Language("fy", "Frisian"),
    Language("gl", "Galician"),
    Language("ka", "Georgian"),
    Language("de", "German"),
    Language("el", "Greek"),
    Language("gu", "Gujarati"),
    Language("ht", "Haitian Creole"),
    Language("ha", "Hausa"),
    Language("haw", "Hawaiian"),
    Language("he", "Hebrew"),
    Language("hi", "Hindi"),
    Language("hmn", "Hmong"),
    Language("hu", "Hungarian"),
    Language("is", "Icelandic"),
    Language("ig", "Igbo"),
    Language("id", "Indonesian"),
    Language("ga", "Irish"),
    Language("it", "Italian"),
    Language("ja", "Japanese"),
    Language("jv", "Javanese"),
    Language("kn", "Kannada"),
    Language("kk", "Kazakh"),
    Language("km", "Khmer"),
    Language("rw", "Kinyarwanda"),
    Language("ko", "Korean"),
    Language("ku", "Kurdish"),
    Language("ky", "Kyrgyz"),
    Language("lo", "Lao"),
    Language("la", "Latin"),
    Language("lv", "Latvian"),
    Language("lt", "Lithuanian"),
    Language("lb", "Luxembourgish"),
    Language("mk", "Macedonian"),
    Language("mg", "Malagasy"),
    Language("ms", "Malay"),
    Language("ml", "Malayalam"),
    Language("mt", "Maltese"),
    Language("mi", "Maori"),
    Language("mr", "Marathi"),
    Language("mn", "Mongolian"),
    Language("my", "Myanmar (Burmese)"),
    Language("ne", "Nepali"),
    Language("no", "Norwegian"),
    Language("ny", "Nyanja (Chichewa)"),
    Language("or", "Odia (Oriya)"),
    Language("ps", "Pashto"),
    Language("fa", "Persian"),
    Language("pl", "Polish"),
    Language("pt", "Portuguese"),
    Language("pa", "Punjabi"),
    Language("ro", "Romanian"),
    Language("ru", "Russian"),
    Language("sm", "Samoan"),
    Language("gd", "Scots Gaelic"),
    Language("sr", "Serbian"),
    Language("st", "Sesotho"),
    Language("sn", "Shona"),
    Language("sd", "Sindhi"),
    Language("si", "Sinhala"),
    Language("sk", "Slovak"),
    Language("sl", "Slovenian"),
    Language("so", "Somali"),
    Language("es", "Spanish"),
    Language("su", "Sundanese"),
    Language("sw", "Swahili"),
    Language("sv", "Swedish"),
    Language("tl", "Tagalog (Filipino)"),
    Language("tg", "Tajik"),
    Language("ta", "Tamil"),
    Language("tt", "Tatar"),
    Language("te", "Telugu"),
    Language("th", "Thai"),
    Language("tr", "Turkish"),
    Language("tk", "Turkmen"),
    Language("uk", "Ukrainian"),
    Language("ur", "Urdu"),
    Language("ug", "Uyghur"),
    Language("uz", "Uzbek"),
    Language("vi", "Vietnamese"),
    Language("cy", "Welsh"),
    Language("xh", "Xhosa"),
    Language("yi", "Yiddish"),
    Language("yo", "Yoruba"),
    Language("zu", "Zulu"),
)


class LanguageCatalog:
    """Static code -> display name lookup for the supported target languages."""

    def __init__(self, languages: tuple[Language, ...] = LANGUAGES) -> None:
        self._languages = languages
        self._by_code = {language.code: language for language in languages}

    def __len__(self) -> int:
        return len(self._languages)

    def all(self) -> list[Language]:
        return list(self._languages)

    def is_supported(self, code: str) -> bool:
        return code in self._by_code

    def resolve_name(self, code: str) -> str:
        # Unknown codes fall back to the code itself so records stay fully populated.
        language = self._by_code.get(code)
        return language.name if language is not None else code

    def search(self, term: str) -> list[Language]:
        needle = term.strip().lower()
        if not needle:
            return self.all()
        return [
            language
            for language in self._languages
            if needle in language.name.lower() or needle in language.code.lower()
        ]
