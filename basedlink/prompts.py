"""
Prompt templates for the LinkedIn post pipeline stages.
"""

from typing import Sequence, Union


EmojiLevel = Union[str, int, float]

EMOJI_LEVELS = ("none", "minimal", "moderate", "rich")

STRICT_ARRAY_RULES = (
    "OUTPUT FORMAT:\n"
    "- STRICT JSON ARRAY ONLY.\n"
    '- DO NOT include "Here are...", "Below are...", or any intro text.\n'
    "- Start immediately with [.\n"
    "- End immediately with ]."
)


def _clamp_score(value, default: float = 5) -> float:
    try:
        score = float(value)
    except (TypeError, ValueError):
        return default
    return max(0.0, min(10.0, score))


def get_tone_instruction(tone: float = 5) -> str:
    """Voice instruction for a 0-10 tone slider (0 formal, 10 casual)."""
    value = _clamp_score(tone)
    if value <= 3:
        return (
            "**TONE: AUTHORITATIVE & ANALYTICAL**\n"
            "- Use professional, formal language\n"
            "- Structure: Numbered lists (1️⃣, 2️⃣, 3️⃣)\n"
            '- Include frameworks/concepts (e.g., "Atomic Habits", "Law of Least Effort")\n'
            "- Longer, more detailed explanations\n"
            '- Vocabulary: "Saya menyimpulkan", "fenomena ini terjadi", "observasi", "refleksi"\n'
            '- Avoid casual slang ("aku", "banget", "gak")\n'
            "- End with thought-provoking question\n"
            '- Example: "Apakah teman-teman setuju dengan observasi ini?"'
        )
    if value <= 6:
        return (
            "**TONE: BALANCED (PROFESSIONAL YET APPROACHABLE)**\n"
            "- Mix formal and casual language\n"
            "- Structure: Mix of numbered lists and emoji bullets\n"
            "- Moderate detail level\n"
            '- Vocabulary: Mix "saya" and "aku", professional but not stiff\n'
            "- Some emojis (1-2 max)\n"
            '- Example: "Menurut saya, ada 3 alasan utama..."'
        )
    return (
        "**TONE: SOCIAL & CONVERSATIONAL (CLOSE FRIEND)**\n"
        "- Use casual, everyday language\n"
        "- Structure: Emoji bullets (✅, 🎯, 💡)\n"
        "- Shorter, punchier sentences\n"
        '- Vocabulary: "aku", "banget", "gak", "gimana", "relate"\n'
        "- Lots of emojis (2-3 per section)\n"
        '- Personal anecdotes: "Jujur aku...", "Ada yang relate?"\n'
        '- Rhetorical questions: "Gimana menurut kalian?"\n'
        '- Example: "Niatnya cuma login sebentar, sadar-sadar sudah 4 jam. Ada yang relate? 😅"'
    )


def resolve_emoji_level(level: EmojiLevel = "moderate") -> str:
    if isinstance(level, bool):
        return "moderate"
    if isinstance(level, (int, float)):
        value = _clamp_score(level)
        if value <= 2:
            return "none"
        if value <= 4:
            return "minimal"
        if value <= 7:
            return "moderate"
        return "rich"
    name = str(level or "").strip().lower()
    if name.isdigit():
        return resolve_emoji_level(int(name))
    return name if name in EMOJI_LEVELS else "moderate"


_EMOJI_INSTRUCTIONS = {
    "none": (
        "**EMOJI USAGE: NONE (SERIOUS/PROFESSIONAL)**\n"
        "- **CRITICAL**: Do NOT use ANY emojis at all\n"
        "- No emoji bullets, no emoji in text, no emoji anywhere\n"
        "- This is for professional/corporate tone or to avoid AI detection\n"
        '- Use plain text bullets: "•" or "-" or numbered lists'
    ),
    "minimal": (
        "**EMOJI USAGE: MINIMAL (SUBTLE)**\n"
        "- Use ONLY 1-2 emojis in the ENTIRE post\n"
        '- Place at the very end as a closing touch (e.g., "Thoughts? 💭")\n'
        "- OR use one emoji in the hook only\n"
        "- Avoid emoji bullets\n"
        "- Keep it very subtle and professional"
    ),
    "moderate": (
        "**EMOJI USAGE: MODERATE (BALANCED)**\n"
        "- Use 3-5 emojis total\n"
        "- Can use emoji bullets for lists (✅, 🎯, 💡)\n"
        "- 1-2 emojis in body text for emphasis\n"
        "- Avoid overuse - keep it tasteful\n"
        '- Example: "3 reasons: ✅ Access ✅ Convenience ✅ Instant"'
    ),
    "rich": (
        "**EMOJI USAGE: RICH (VERY LIVELY)**\n"
        "- Use 5+ emojis throughout the post\n"
        "- Emoji bullets for all list items\n"
        "- Emojis in hook, body, and CTA\n"
        "- Make it visually engaging and fun\n"
        '- Example: "Niatnya cuma login sebentar 📱, sadar-sadar sudah 4 jam ⏰. Ada yang relate? 😅"'
    ),
}


def get_emoji_instruction(level: EmojiLevel = "moderate") -> str:
    return _EMOJI_INSTRUCTIONS[resolve_emoji_level(level)]


_LANGUAGE_INSTRUCTIONS = {
    "en": (
        "**LANGUAGE: ENGLISH**\n"
        "- Write the ENTIRE post in English\n"
        "- Use English vocabulary, grammar, and idioms\n"
        '- Examples: "I used to think...", "Here\'s why...", "Thoughts?"\n'
        "- Do NOT mix Indonesian words"
    ),
    "id": (
        "**LANGUAGE: INDONESIAN (BAHASA INDONESIA)**\n"
        "- Write the ENTIRE post in Bahasa Indonesia\n"
        "- Use Indonesian vocabulary, grammar, and expressions\n"
        "- **CRITICAL EXCEPTION**: Keep these in ENGLISH (do NOT translate):\n"
        '  * English idioms: "Unpopular opinion", "game-changer", "mindset", "plot twist"\n'
        '  * Technical terms: "AI", "machine learning", "blockchain", "SaaS"\n'
        '  * Brand names: "Korean BBQ", "Bulgogi", "LinkedIn", "ChatGPT"\n'
        "  * Proper nouns: Names of people, places, products\n"
        "- Examples:\n"
        '  * ✅ "Unpopular opinion: Aku dulu mikir bahwa..."\n'
        '  * ✅ "Ini adalah game-changer untuk bisnis kita"'
    ),
}


def get_language_instruction(language: str = "id") -> str:
    key = (language or "id").strip().lower()
    return _LANGUAGE_INSTRUCTIONS.get(key, _LANGUAGE_INSTRUCTIONS["id"])


def get_length_instruction(length: str = "medium") -> str:
    key = (length or "medium").strip().lower()
    if key == "short":
        return "SHORT & PUNCHY. 50-100 words. At least 5 sentences. Keep it tight and impactful."
    if key == "long":
        return "LONG FORM. 200-300 words. Deep analysis with multiple sections."
    return "MEDIUM LENGTH. 100-200 words. At least 8 sentences."


def build_topics_prompt(user_input: str, count: int = 10) -> str:
    placeholders = ", ".join(f'"Topic {i}"' for i in range(1, count + 1))
    return (
        f"Generate exactly {count} distinct, viral-worthy LinkedIn post topics "
        f'based on the user\'s input: "{user_input}".\n\n'
        "REQUIREMENTS:\n"
        "- Focus on professional insights, personal growth, or industry trends\n"
        "- Each topic should be unique and engaging\n"
        "- Make them scroll-stopping and curiosity-inducing\n"
        "- Keep each topic concise (1-2 sentences max)\n\n"
        f"{STRICT_ARRAY_RULES}\n"
        f"- The array must contain {count} strings.\n\n"
        f"Example: [{placeholders}]"
    )


def build_hooks_prompt(topic: str, intent: str = "viral", count: int = 8) -> str:
    return (
        f"You are a LinkedIn Viral Content Expert. Write {count} powerful, "
        f'scroll-stopping hooks for the topic: "{topic}".\n\n'
        f"Intent: {(intent or 'viral').upper()}\n\n"
        "HOOK WRITING RULES:\n"
        "1. **First Line is CRITICAL** - Must stop the scroll immediately\n"
        "2. **Pattern Breaking** - Use unexpected angles, contrarian takes, or surprising facts\n"
        "3. **Curiosity Gap** - Make readers NEED to know more\n"
        "4. **Emotional Trigger** - Fear of missing out, surprise, anger, joy, inspiration\n"
        "5. **Specific > Generic** - Use numbers, names, concrete examples\n\n"
        "PROVEN HOOK FORMULAS:\n"
        '- "I spent [X time/money] on [Y]. Here\'s what I learned..."\n'
        '- "Everyone does [X]. Here\'s why you should do [Y] instead..."\n'
        '- "Unpopular opinion: [controversial take]"\n'
        '- "[Number] [surprising thing] that [result]"\n'
        '- "I used to [belief]. Then I discovered [truth]..."\n'
        '- "The biggest lie about [topic]: [statement]"\n\n'
        "LANGUAGE:\n"
        "- Use Bahasa Indonesia naturally\n"
        '- Keep English idioms/technical terms (e.g., "game-changer", "mindset", "AI")\n'
        "- Conversational and authentic tone\n\n"
        f"{STRICT_ARRAY_RULES}\n\n"
        'Example: ["Hook 1...", "Hook 2...", "Hook 3..."]'
    )


def build_body_prompt(
    hook: str,
    context: str,
    intent: str,
    length: str,
    research_context: str = "",
    style_examples: Sequence[str] = (),
    tone: float = 5,
    emoji_density: EmojiLevel = "moderate",
    language: str = "id",
    count: int = 4,
) -> str:
    examples = "\n\n".join(
        f"[Example {i} - Style Reference]\n{body}" for i, body in enumerate(style_examples, 1)
    )
    return (
        "You are a LinkedIn Ghostwriter. Expert at viral content that gets engagement.\n\n"
        f'Write the MAIN BODY for a LinkedIn post using this Hook: "{hook}".\n'
        f'Topic Context: "{context}".\n'
        f"Length: {get_length_instruction(length)}\n"
        f"Intent: {(intent or 'viral').upper()}\n\n"
        f"{get_language_instruction(language)}\n"
        f"{get_tone_instruction(tone)}\n"
        f"{get_emoji_instruction(emoji_density)}\n\n"
        "CONTEXT from Web Research:\n"
        f"{research_context}\n\n"
        "STYLE REFERENCES (Mimic these patterns):\n"
        f"{examples}\n\n"
        "CRITICAL WRITING RULES:\n"
        "1. **One Idea Per Line** - Break thoughts into separate lines for readability\n"
        "2. **Short Sentences** - Max 15 words per sentence\n"
        '3. **Active Voice** - "I discovered" not "It was discovered"\n'
        "4. **Visual Hierarchy** - Use line breaks generously\n"
        "5. **No Fluff** - Every word must add value\n"
        '6. **Personal Stories** - Use "Saya", "Aku" to make it relatable\n'
        "7. **Specific Examples** - Real numbers, names, situations\n"
        "8. **Pattern: Problem → Insight → Action**\n\n"
        "FORMATTING (MANDATORY):\n"
        "- **CRITICAL**: Use double newline characters (\\n\\n) between EVERY paragraph or list item.\n"
        "- **DO NOT** write long walls of text.\n"
        "- **DO NOT** mimic the dense formatting of the examples above. YOUR formatting must be cleaner.\n"
        "- Single line for impact statements\n"
        "- Natural emoji placement (not forced)\n\n"
        "INSTRUCTIONS:\n"
        f"- Generate EXACTLY {count} distinct variations\n"
        "- Each variation should have a different angle/approach\n"
        "- End with a strong closing thought (not CTA - that comes later)\n\n"
        f"{STRICT_ARRAY_RULES}\n"
        f"- The array must contain {count} strings.\n"
        "- The strings MUST contain \\n\\n for line breaks.\n\n"
        'Example format: ["Body Option 1...\\n\\nNEXT PARAGRAPH...\\n\\nfinal point.", "Body Option 2..."]'
    )


def build_cta_prompt(body: str, intent: str, count: int = 4) -> str:
    excerpt = (body or "")[:150]
    return (
        f"You are a LinkedIn engagement expert. Generate {count} compelling "
        "Call-To-Actions (CTAs) for a LinkedIn post.\n\n"
        f'Post Body Context: "{excerpt}..."\n'
        f"Intent: {(intent or 'viral').upper()}\n\n"
        "CTA RULES:\n"
        "1. **Keep it SHORT** - Max 2 sentences\n"
        "2. **Engage, Don't Sell** - Ask questions, invite discussion\n"
        "3. **Match the Tone** - Align with the post's vibe\n"
        "4. **Natural Flow** - Should feel like a conversation closer\n\n"
        "CTA TYPES TO VARY:\n"
        '- Question: "Setuju? Atau ada perspektif lain?"\n'
        '- Invitation: "Share pengalaman kalian di comments 👇"\n'
        '- Reflection: "Bagaimana menurut kalian?"\n'
        '- Community: "Tag someone yang perlu baca ini!"\n\n'
        "LANGUAGE:\n"
        "- Use Bahasa Indonesia conversationally\n"
        "- Keep emoji usage light (1-2 max per CTA)\n"
        "- Authentic and warm tone\n\n"
        f"{STRICT_ARRAY_RULES}\n\n"
        'Example: ["CTA 1", "CTA 2", "CTA 3", "CTA 4"]'
    )


def build_polish_prompt(content: str, tone: float = 5, emoji_density: EmojiLevel = "moderate") -> str:
    return (
        "Polish this LinkedIn post following this EXACT structure for consistency:\n\n"
        "Original post:\n"
        f'"{content}"\n\n'
        f"{get_tone_instruction(tone)}\n"
        f"{get_emoji_instruction(emoji_density)}\n\n"
        "FORMATTING RULES (CRITICAL):\n"
        "1. **Line Breaks**: Add proper spacing between paragraphs (double newline).\n"
        "2. **Visual Hierarchy**: Use CAPS for 1-2 key phrases.\n"
        "3. **Readability**: Keep sentences short and punchy.\n"
        "4. **Hashtags**: Add max 5 hashtags at the end.\n\n"
        "Return ONLY the polished post text, nothing else."
    )
