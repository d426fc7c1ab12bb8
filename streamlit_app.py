"""
Streamlit web interface for the AI Landing Page Generator.

Collects a short business description (plus up to two optional photos),
runs the image-then-page generation cycle, and previews the resulting page.
"""

import logging

import streamlit as st
import streamlit.components.v1 as components
from dotenv import load_dotenv

from landing_gen.config import GenerationSettings
from landing_gen.errors import ArtifactNotFoundError, MissingCredentialError, ValidationError
from landing_gen.io.image_loader import ALLOWED_MIME_TYPES, ImageLoader, decode_data_uri
from landing_gen.models import MAX_IMAGES, BusinessFormData, Industry
from landing_gen.orchestration import ArtifactStore, GenerationPhase, Orchestrator
from landing_gen.pipeline.generation import GenerationClient
from landing_gen.utils.session_loop import SessionLoop

# Load environment variables
load_dotenv()
logging.basicConfig(level=logging.INFO)

# Page configuration
st.set_page_config(
    page_title="AI Landing Page Generator",
    page_icon="✨",
    layout="wide",
)

# Custom CSS
st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: 700;
        text-align: center;
        margin-bottom: 0.5rem;
    }
    .sub-header {
        font-size: 1.1rem;
        color: #666;
        text-align: center;
        margin-bottom: 2rem;
    }
</style>
""", unsafe_allow_html=True)

PHASE_MESSAGES = {
    GenerationPhase.GENERATING_IMAGE: "Creating a unique illustrative image...",
    GenerationPhase.GENERATING_PAGE: "Building your custom landing page...",
}

UPLOAD_TYPES = [mime.split("/")[1] for mime in ALLOWED_MIME_TYPES] + ["jpg"]


def get_orchestrator() -> Orchestrator:
    """Create the session's orchestrator once; refuse to run without a credential."""
    if "orchestrator" not in st.session_state:
        settings = GenerationSettings.from_env()
        store = ArtifactStore()
        try:
            client = GenerationClient(settings, session_id=store.session_id)
        except MissingCredentialError as e:
            st.error(f"Configuration error: {e}")
            st.stop()
        st.session_state.orchestrator = Orchestrator(client, store)
    return st.session_state.orchestrator


def get_session_loop() -> SessionLoop:
    """Event loop shared by every async call of this browser session."""
    if "session_loop" not in st.session_state:
        st.session_state.session_loop = SessionLoop()
    return st.session_state.session_loop


def main():
    """Main application entry point."""
    orchestrator = get_orchestrator()

    st.markdown('<div class="main-header">✨ AI Landing Page Generator</div>', unsafe_allow_html=True)
    st.markdown(
        '<div class="sub-header">Describe your business and get a unique image and a complete '
        'web page in seconds.</div>',
        unsafe_allow_html=True,
    )

    form_col, preview_col = st.columns(2, gap="large")

    with preview_col:
        st.subheader("2. Your generated page")
        status_area = st.empty()

    with form_col:
        st.subheader("1. Tell us about your business")
        business_form(orchestrator, status_area)

    with preview_col:
        with status_area.container():
            preview_panel(orchestrator)


def business_form(orchestrator: Orchestrator, status_area):
    """Form collector: gather business data and submit it."""
    loading = orchestrator.snapshot().is_loading

    with st.form("business_form"):
        name = st.text_input("Business name", placeholder="e.g. Café Sol")
        industry = st.selectbox("Industry", Industry.choices())
        uploads = st.file_uploader(
            f"Upload your own images (optional, up to {MAX_IMAGES})",
            type=UPLOAD_TYPES,
            accept_multiple_files=True,
            help="PNG, JPG, GIF or WEBP up to 10MB",
        )
        description = st.text_area(
            "Describe your business",
            placeholder="e.g. A family coffee shop serving specialty coffee and homemade desserts.",
        )
        sells = st.text_area(
            "What do you sell? (products or services)",
            placeholder="e.g. Espresso, lattes, cappuccinos, cakes, cookies, sandwiches.",
        )
        phone = st.text_input(
            "WhatsApp number (optional)",
            placeholder="e.g. 5215512345678 (include country code)",
            help="Used for the direct contact button.",
        )
        submitted = st.form_submit_button(
            "Generating..." if loading else "Create my web page",
            type="primary",
            disabled=loading,
            use_container_width=True,
        )

    if uploads and len(uploads) > MAX_IMAGES:
        st.warning(f"Only the first {MAX_IMAGES} images will be used.")

    if not submitted:
        return

    if not (name.strip() and description.strip() and sells.strip()):
        st.warning("Please fill in the business name, description and what you sell.")
        return

    session_loop = get_session_loop()
    loader = ImageLoader()
    try:
        images = session_loop.run(loader.read_uploads(uploads))
        data = BusinessFormData.create(
            name=name,
            industry=industry,
            description=description,
            sells=sells,
            phone=phone,
            images=images,
        )
    except ValidationError as e:
        st.error(str(e))
        return

    def show_progress(state):
        message = PHASE_MESSAGES.get(state.phase)
        if message:
            status_area.info(f"⏳ {message}")

    orchestrator.on_change = show_progress
    try:
        session_loop.run(orchestrator.submit(data))
    finally:
        orchestrator.on_change = None


def preview_panel(orchestrator: Orchestrator):
    """Preview renderer: show the artifact, the error, or a hint."""
    snapshot = orchestrator.snapshot()

    if snapshot.phase == GenerationPhase.FAILED:
        st.error(snapshot.error_message)
        return

    if snapshot.phase != GenerationPhase.READY:
        st.info("Your page preview will appear here.")
        return

    try:
        html = orchestrator.store.resolve(snapshot.artifact_url)
    except ArtifactNotFoundError:
        st.warning("This preview is no longer available. Please generate it again.")
        return

    components.html(html, height=600, scrolling=True)

    with st.expander("Hero image"):
        _, image_bytes = decode_data_uri(snapshot.image_data_uri)
        st.image(image_bytes, use_container_width=True)

    st.text_input(
        "Preview URL (valid in this session)",
        value=snapshot.artifact_url,
        disabled=True,
    )

    download_col, reset_col = st.columns(2)
    with download_col:
        st.download_button(
            "⬇️ Download HTML",
            data=html,
            file_name="landing_page.html",
            mime="text/html",
            use_container_width=True,
        )
    with reset_col:
        if st.button("🔄 Create another", use_container_width=True):
            orchestrator.reset()
            st.rerun()


if __name__ == "__main__":
    main()
