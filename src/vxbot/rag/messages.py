"""User-facing Korean answers returned by the query pipeline."""

NO_INFORMATION_ANSWER = (
    "죄송합니다. VX 데이터에서 관련 정보를 찾을 수 없습니다. "
    "더 구체적인 질문을 해주시거나 VX팀에 직접 문의해주세요."
)

INSUFFICIENT_CONTEXT_ANSWER = (
    "VX 데이터에서 해당 질문에 대한 충분한 정보를 찾을 수 없습니다. 더 구체적으로 질문해주세요."
)

GENERIC_FAILURE_ANSWER = "죄송합니다. 처리 중 오류가 발생했습니다. 잠시 후 다시 시도해주세요."

TRUNCATION_SUFFIX = "💡 더 자세한 내용은 구체적으로 질문해주세요."

DIRECT_ANSWER_HEADER = "🎬 VX 보유 정보:"

DIRECT_ANSWER_SOURCES = "📚 출처: {sources}"

DIRECT_ANSWER_MORE_HINT = "💡 더 구체적인 질문을 하시면 더 정확한 답변을 드릴 수 있습니다."

# Greetings and closings the model tends to add despite the prompt
FILLER_PHRASES: tuple[str, ...] = (
    "안녕하세요!",
    "안녕하세요.",
    "안녕하세요",
    "도움이 되셨길 바랍니다.",
    "도움이 되었으면 좋겠습니다.",
    "도움이 되길 바랍니다.",
    "추가 질문이 있으시면 언제든지 물어보세요.",
    "추가로 궁금한 점이 있으시면 언제든지 문의해주세요.",
    "궁금한 점이 있으시면 언제든지 문의해주세요.",
    "감사합니다.",
    "감사합니다!",
)
