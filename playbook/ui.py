import streamlit as st
import requests

from playbook.config import APP, CLIENT, DISPLAY

API_URL = CLIENT["api_url"]

st.title(APP["title"])
st.markdown("**Monthly ALSFRS-R check-in with stage suggestions for your roadmap**")
st.caption(APP["disclaimer"])


@st.cache_data
def load_questions():
    response = requests.get(f"{API_URL}/questions", timeout=CLIENT["timeout"])
    response.raise_for_status()
    return response.json()


def reset_assessment():
    st.session_state.answers = {}
    st.session_state.index = 0
    st.session_state.result = None


if "answers" not in st.session_state:
    reset_assessment()

try:
    questions = load_questions()
except requests.exceptions.RequestException as e:
    st.error(f"Could not connect to the backend: {e}")
    st.stop()

# --- Finished: show the stored result ---
if st.session_state.result:
    result = st.session_state.result
    scores = result["scores"]
    st.markdown("## Your Scores")
    cols = st.columns(4)
    for col, part in zip(cols, ["total", "bulbar", "motor", "respiratory"]):
        col.metric(part.title(), f"{scores[part]['score']}/{scores[part]['max']}")

    st.markdown("## Suggested Stages Based on Your Score")
    if not result["triggers"]:
        st.success("No stage suggestions right now.")
    for trigger in result["triggers"]:
        st.markdown(f"**{trigger['stage_id']} - {trigger['stage_name']}** ({trigger['alert_level']})")
        st.markdown(trigger["message"])

    if st.button("Start New Assessment"):
        reset_assessment()
        st.rerun()
    st.stop()

# --- One question at a time; an answer is required before moving on ---
index = st.session_state.index
question = questions[index]
st.markdown(f"Question {index + 1} of {len(questions)} | {len(st.session_state.answers)} answered")
st.markdown(f"### {question['app_question']}")
st.caption(question["what_it_measures"])

labels = [option["label"] for option in question["options"]]
values = [option["value"] for option in question["options"]]
current = st.session_state.answers.get(question["id"])
choice = st.radio(
    "Choose one",
    labels,
    index=values.index(current) if current in values else None,
    key=f"q-{question['id']}",
)
if choice is not None:
    st.session_state.answers[question["id"]] = values[labels.index(choice)]

if question.get("time_warning"):
    st.warning(question["time_warning"])

back, forward = st.columns(2)
if back.button("Back", disabled=index == 0):
    st.session_state.index = max(0, index - 1)
    st.rerun()

is_last = index == len(questions) - 1
if forward.button("Submit" if is_last else "Next", disabled=question["id"] not in st.session_state.answers):
    if not is_last:
        st.session_state.index = index + 1
        st.rerun()
    with st.spinner("Saving your assessment..."):
        try:
            response = requests.post(
                f"{API_URL}/assessments",
                json={"answers": st.session_state.answers},
                timeout=CLIENT["timeout"],
            )
            response.raise_for_status()
            st.session_state.result = response.json()
            st.rerun()
        except requests.exceptions.RequestException as e:
            st.error(f"Could not save the assessment: {e}")

# Live preview while answering; unanswered questions never trigger here
if st.session_state.answers:
    try:
        preview = requests.post(
            f"{API_URL}/triggers",
            params={"missing": "skip", "limit": DISPLAY["alert_limit"]},
            json={"answers": st.session_state.answers},
            timeout=CLIENT["timeout"],
        )
        preview.raise_for_status()
        with st.sidebar:
            st.markdown("## Early Stage Suggestions")
            for trigger in preview.json():
                st.markdown(f"**{trigger['stage_id']}** {trigger['message']}")
    except requests.exceptions.RequestException as e:
        st.sidebar.error(f"Could not load suggestions: {e}")
