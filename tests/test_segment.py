import pytest

from kousei.services.segment import is_in_dialogue, mask_dialogue, split_sentences, tokens_in_span


def test_split_sentences_offsets_point_into_original():
    text = "今日は晴れ。明日は雨！本当？"
    spans = split_sentences(text)
    assert [s.text for s in spans] == ["今日は晴れ", "明日は雨", "本当"]
    for s in spans:
        assert text[s.from_:s.to] == s.text


def test_split_sentences_drops_blank_and_keeps_trailing_fragment():
    spans = split_sentences("。。  \n続きがある")
    assert len(spans) == 1
    assert spans[0].text == "続きがある"
    assert spans[0].to == len("。。  \n続きがある")


def test_split_sentences_empty():
    assert split_sentences("") == []


@pytest.mark.parametrize("text", [
    "彼は「こんにちは」と言った。",
    "「『入れ子』の話」",
    "閉じていない「会話",
    "余計な」閉じ括弧",
    "",
])
def test_mask_dialogue_preserves_length(text):
    assert len(mask_dialogue(text)) == len(text)


def test_mask_dialogue_masks_brackets_and_contents():
    assert mask_dialogue("彼は「はい」と言った") == "彼は〇〇〇〇と言った"


def test_mask_dialogue_nested_families():
    assert mask_dialogue("「『あ』い」う") == "〇〇〇〇〇〇う"


def test_mask_dialogue_stray_closer_does_not_open():
    assert mask_dialogue("あ」い") == "あ〇い"


def test_is_in_dialogue():
    text = "彼は「はい」と言った"
    assert not is_in_dialogue(0, text)
    assert is_in_dialogue(2, text)  # opening bracket
    assert is_in_dialogue(3, text)
    assert is_in_dialogue(5, text)  # closing bracket
    assert not is_in_dialogue(6, text)
    assert not is_in_dialogue(99, text)


def test_tokens_in_span(make_tokens):
    text = "猫が寝る。犬も寝る。"
    tokens = make_tokens(text, [("猫", "名詞"), ("が", "助詞"), ("寝る", "動詞"), ("。", "補助記号"),
                                ("犬", "名詞"), ("も", "助詞"), ("寝る", "動詞"), ("。", "補助記号")])
    second = tokens_in_span(tokens, 5, 9)
    assert [t.surface for t in second] == ["犬", "も", "寝る"]
