"""
Шаблоны запросов к модели для каждой AI-операции.
"""
import json

ENHANCE_TEMPLATE = (
    "As an expert career coach, rewrite the following resume's '{section}' section "
    "to be more impactful and ATS-friendly. Keep it concise and professional. "
    "Here is the text: '{text}'"
)

JOB_MATCH_TEMPLATE = (
    "Analyze the following resume and job description. Identify key skills and "
    "qualifications from the job description. Then, evaluate how well the resume matches "
    "these requirements. Provide a matching score as a percentage "
    '(e.g., "MATCH_SCORE: 85%") and a brief analysis of strengths and areas for improvement. '
    "Resume: {resume}. Job Description: {job_description}"
)

TRANSLATE_TEMPLATE = (
    "Translate every field in the following JSON object into {language}. Maintain the original "
    "JSON structure and keys. Do not translate the keys, only translate the values. Ensure all "
    "text content is accurately translated while preserving professional resume terminology. "
    "Return only the translated JSON object without any additional text or explanation. "
    "Here is the JSON: {resume}"
)


def _resume_json(resume_data: dict) -> str:
    return json.dumps(resume_data, ensure_ascii=False)


def enhance_prompt(text: str, section: str) -> str:
    return ENHANCE_TEMPLATE.format(section=section.strip(), text=text.strip())


def job_match_prompt(resume_data: dict, job_description: str) -> str:
    return JOB_MATCH_TEMPLATE.format(resume=_resume_json(resume_data), job_description=job_description.strip())


def translate_prompt(resume_data: dict, language: str) -> str:
    return TRANSLATE_TEMPLATE.format(language=language.strip(), resume=_resume_json(resume_data))
