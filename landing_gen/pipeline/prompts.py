"""
Prompt templates for image and landing page generation.
"""

from urllib.parse import quote

from landing_gen.models import BusinessFormData

WHATSAPP_GREETING = "Hola estoy interesado (a) en tus servicios"

WHATSAPP_BUTTON_TEMPLATE = """
    <a href="{url}" target="_blank" class="inline-block bg-green-500 text-white font-bold py-3 px-8 rounded-full hover:bg-green-600 transition duration-300 text-lg shadow-lg">
      {label}
    </a>"""

WHATSAPP_BUTTON_LABEL = "Contáctanos en WhatsApp"


IMAGE_FROM_REFERENCES_PROMPT = """Based on the business information below and inspired by the attached image(s),
create ONE new illustrative image that is professional and visually appealing for the business landing page.
- Business name: {name}
- Industry: {industry}
- Description: {description}
The new image must capture the essence of the business (e.g. a logo, a hero banner, an illustration).
It must be a unique artistic creation, not a simple edit of the photos.
Style: modern, clean, vibrant, trustworthy. Do not include any text in the image."""


IMAGE_FROM_TEXT_PROMPT = """Create a professional, visually appealing image for a landing page.
- Business name: {name}
- Industry: {industry}
- Description: {description}
- Sells: {sells}
The image must look modern, clean and vibrant, and evoke trust and quality.
It should be a high quality illustration or photograph that represents the essence of the business.
Avoid including text in the image.
Visual style: minimalist, professional, attractive. Aspect ratio 16:9."""


PAGE_PROMPT_TEMPLATE = """You are an expert frontend developer and UX/UI designer. Your task is to generate the complete
HTML code for a modern, professional single-page landing page.
Use Tailwind CSS for all styling. The design must be clean, attractive and fully responsive.
The page must be written in {language}.

Business information:
- Business name: {name}
- Industry: {industry}
- Detailed description: {description}
- Products/services sold: {sells}
{images_note}
The page structure must include:
1. A hero section with a catchy headline, a subtitle and the main image. The image goes here:
   <img src="{placeholder}" alt="Main business image" class="w-full h-full object-cover rounded-xl shadow-2xl">
2. An "About us" section based on the business description.
3. A "Products/Services" section that clearly lists what the business sells.
4. A call-to-action (CTA) section. {cta_instruction}
5. A simple footer with the business name and the current year.

Important requirements:
- ALL the code must be inside a single HTML document.
- Start with `<!DOCTYPE html>` and end with `</html>`.
- Include the Tailwind CSS script in the `<head>`.
- Use a professional color palette and readable fonts (e.g. from Google Fonts).
- The copy must be persuasive and well written in {language}, based on the information provided.
- Keep the literal text {placeholder} wherever the main image is referenced.
- Do NOT include explanations, code comments or anything other than pure HTML.

WhatsApp button to insert in the CTA section (if applicable):
{cta_html}

Now generate the complete HTML code."""

IMAGES_NOTE = (
    "- The user provided photos of the business as inspiration; keep the copy consistent "
    "with a more personalised visual style.\n"
)

CTA_WITH_BUTTON = "Yes, include the WhatsApp button below."
CTA_GENERIC = "No phone number was provided, create a generic CTA."


def whatsapp_url(phone_digits: str) -> str:
    """Build the wa.me link with the pre-filled greeting."""
    return f"https://wa.me/{phone_digits}?text={quote(WHATSAPP_GREETING, safe='()')}"


def build_cta_html(data: BusinessFormData) -> str:
    """WhatsApp call-to-action button, or an empty string without a phone."""
    digits = data.phone_digits
    if not digits:
        return ""
    return WHATSAPP_BUTTON_TEMPLATE.format(url=whatsapp_url(digits), label=WHATSAPP_BUTTON_LABEL)


def build_image_prompt(data: BusinessFormData) -> str:
    template = IMAGE_FROM_REFERENCES_PROMPT if data.has_images else IMAGE_FROM_TEXT_PROMPT
    return template.format(
        name=data.name,
        industry=data.industry,
        description=data.description,
        sells=data.sells,
    )


def build_page_prompt(data: BusinessFormData, placeholder: str, language: str) -> str:
    cta_html = build_cta_html(data)
    return PAGE_PROMPT_TEMPLATE.format(
        language=language,
        name=data.name,
        industry=data.industry,
        description=data.description,
        sells=data.sells,
        images_note=IMAGES_NOTE if data.has_images else "",
        placeholder=placeholder,
        cta_instruction=CTA_WITH_BUTTON if cta_html else CTA_GENERIC,
        cta_html=cta_html,
    )
