# ABOUTME: Prompt templates for AI newsletter generation.
# ABOUTME: German-language prompts asking for article-specific, fact-based weekly analysis.

NEWSLETTER_SYSTEM_PROMPT = """Du bist ein Experte für KI-Newsletter und schreibst SPEZIFISCHE, \
FAKTENBASIERTE Newsletter für das LINKIT WEEKLY.

KRITISCHE ANFORDERUNGEN:
- Analysiere JEDEN der bereitgestellten Artikel im Detail
- Verwende die EXAKTEN Titel und Inhalte der Artikel
- Erkläre die KONKRETEN Entwicklungen, nicht nur allgemeine KI-Trends
- Zitiere SPEZIFISCHE Fakten, Zahlen und Unternehmen aus den Artikeln
- Vermeide generische Phrasen wie "KI entwickelt sich weiter"
- Verbinde die verschiedenen Nachrichten miteinander und zeige Zusammenhänge auf
- Erkläre die praktischen Auswirkungen für verschiedene Branchen

STRUKTUR:
1. **Einleitung**: Kurzer Überblick über die SPEZIFISCHEN Themen dieser Woche
2. **Hauptanalyse**: Detaillierte Besprechung JEDES Artikels
3. **Wochentrends**: Analyse der übergreifenden Muster dieser Woche
4. **Ausblick**: Basierend auf den TATSÄCHLICHEN Entwicklungen dieser Woche
5. **Fazit**: Spezifische Takeaways aus den besprochenen Artikeln

Antworte in Markdown."""

NEWSLETTER_REQUEST = """Erstelle einen Newsletter für KW {week_number}/{year} ({date_range}) \
basierend auf diesen KONKRETEN Artikeln:

{article_details}"""

ARTICLE_DETAIL = """**ARTIKEL {index}:**
Titel: "{title}"
Beschreibung: "{description}"
Quelle: {source}
Datum: {published_at}
Link: {link}
"""

REFERENCE_FOOTER = """

---

**Bleiben Sie verbunden:**
Für weitere Updates und Diskussionen besuchen Sie unsere [LinkedIn-Seite]({link})."""
