"""Article pattern table - angles an article can take per category."""

import random
from dataclasses import dataclass, field

PRODUCT_PLACEHOLDER = "[商品名]"
COMPETITOR_PLACEHOLDERS = ("[競合商品]", "[競合A]")


@dataclass(frozen=True)
class Pattern:
    """One article angle: display name, title templates and writing intent."""

    name: str
    titles: tuple[str, ...]
    prompt: str


@dataclass(frozen=True)
class PatternGroup:
    """Patterns available for a category."""

    name: str
    patterns: dict[str, Pattern] = field(default_factory=dict)


PATTERNS: dict[str, PatternGroup] = {
    "food": PatternGroup("食品・サプリ", {
        "where-to-buy": Pattern(
            "売ってる場所",
            (
                "[商品名]は西松屋にある？売ってる場所（取扱店）を徹底調査",
                "【市販なし？】[商品名]を今すぐ買える店舗とネット通販の在庫まとめ",
            ),
            "商品がどこで購入できるか（西松屋、赤ちゃん本舗、ドラッグストア、Amazon、楽天など）を調査し、各店舗の価格や在庫状況、お得な買い方をまとめる記事",
        ),
        "when-to-start": Pattern(
            "いつから使える？",
            (
                "[商品名]は生後何ヶ月からOK？離乳食初期に使う時の注意点",
                "1歳からでも遅くない？[商品名]を始めるタイミングと量",
            ),
            "商品を何歳・何ヶ月から使えるか、月齢別の使い方、量の目安、注意点をまとめる記事",
        ),
        "safety": Pattern(
            "成分・安全性",
            (
                "[商品名]の添加物は大丈夫？原材料とアレルギーリスクをプロが解析",
                "中国産？国産？[商品名]の安全性と産地について調査してみた",
            ),
            "商品の原材料、添加物、産地、アレルギー情報など安全性に関する情報を詳しく解説する記事",
        ),
        "tips": Pattern(
            "食べない時の対処法",
            (
                "[商品名]を食べてくれない…偏食な子でも完食した魔法のアレンジ5選",
                "混ぜるだけで栄養補給！[商品名]を離乳食にバレずに混ぜるコツ",
            ),
            "子供が食べてくれない時の対処法、アレンジレシピ、混ぜ方のコツなど実用的なテクニックを紹介する記事",
        ),
    }),
    "furniture": PatternGroup("家具・大型用品", {
        "where-to-buy": Pattern(
            "展示店舗・購入場所",
            (
                "[商品名]の展示店舗はどこ？実物を確認できる赤ちゃん本舗・直営店リスト",
                "[商品名]はコストコで買える？最安値ショップと保証の有無を比較",
            ),
            "商品を実際に見て試せる店舗、展示店舗リスト、ネット購入と店舗購入のメリット・デメリットを解説する記事",
        ),
        "regret": Pattern(
            "後悔・デメリット",
            (
                "【正直レポ】[商品名]を買って後悔した3つの理由｜狭い車には不向き？",
                "良い口コミは嘘？[商品名]の使いにくい点と1年使った本音を暴露",
            ),
            "商品のデメリット、後悔しやすいポイント、購入前に知っておくべき注意点を正直にレビューする記事",
        ),
        "size-check": Pattern(
            "サイズ・適合確認",
            (
                "[商品名]はN-BOXでも狭くない？軽自動車への取り付けを実機検証",
                "アパートの狭い玄関に置ける？[商品名]の折りたたみサイズと重量感",
            ),
            "商品のサイズ、重量、車への適合性、部屋に置いた時の存在感など、購入前に確認すべきサイズ関連情報をまとめる記事",
        ),
        "comparison": Pattern(
            "徹底比較",
            (
                "[商品名]と[競合商品]を10項目で比較！結局どっちが買い？",
                "[ブランド名]の[シリーズA]と[シリーズB]の違いを完全図解",
            ),
            "類似商品や競合商品との詳細比較。価格、機能、使いやすさなど複数項目で比較表を作成する記事",
        ),
    }),
    "educational": PatternGroup("知育・おもちゃ", {
        "where-to-buy": Pattern(
            "購入場所",
            (
                "[商品名]の限定版はどこで買える？Amazon・楽天・公式サイトの特典差",
                "トイザらスに[商品名]はある？実店舗とネットの価格差に驚愕",
            ),
            "商品の購入場所、限定版や特典の違い、お得に買える場所を調査する記事",
        ),
        "effect": Pattern(
            "効果・成長記録",
            (
                "2歳が[商品名]で3ヶ月遊んだ結果。言葉の数が増えたって本当？",
                "[商品名]の効果は？飽きっぽい子が夢中になった遊び方の工夫",
            ),
            "商品で遊んだ結果どんな効果があったか、子供の成長にどう影響したかを体験ベースでレポートする記事",
        ),
        "rent-vs-buy": Pattern(
            "レンタルvs購入",
            (
                "[商品名]は買うべき？レンタル（トイサブ等）の方がお得な人の特徴",
                "1ヶ月で飽きるリスクを回避！[商品名]を安く試す方法",
            ),
            "おもちゃのレンタルサービスと購入を比較し、どちらがお得か、それぞれに向いている人の特徴を解説する記事",
        ),
        "alternative": Pattern(
            "代用・100均比較",
            (
                "[商品名]はダイソーの知育玩具で代用できる？本物との決定的な違い",
                "100均で代用できる？[商品名]と類似品の比較レビュー",
            ),
            "高価な知育玩具と100均などの代用品を比較し、本物を買う価値があるかを検証する記事",
        ),
    }),
    "consumable": PatternGroup("衛生・消耗品", {
        "where-to-buy": Pattern(
            "売ってる場所",
            (
                "[商品名]をコンビニで探すならどこ？ローソン・セブン・ファミマ調査",
                "【緊急】[商品名]が切れた！最短当日届くショップと在庫のある店",
            ),
            "コンビニ、ドラッグストア、スーパーなど身近な店舗での取り扱い状況、急ぎで買える場所を調査する記事",
        ),
        "lowest-price": Pattern(
            "最安値比較",
            (
                "[商品名]の1枚単価を比較！Amazon定期便vs楽天お買い物マラソン",
                "最安値更新！[商品名]を実質〇円で買うポイント活用術",
            ),
            "各通販サイトの価格比較、定期便、ポイント還元などを考慮した最安値での買い方を解説する記事",
        ),
        "skin-trouble": Pattern(
            "肌トラブル・相性",
            (
                "アトピー肌の子に[商品名]を使ってみた結果。かぶれ・赤みの変化は？",
                "[商品名]と[競合商品]の吸収力を比較。夜中のおしっこ漏れ対策にはどっち？",
            ),
            "敏感肌やアトピー肌での使用感、肌トラブルの有無、他商品との肌への優しさ比較をレポートする記事",
        ),
    }),
    "outdoor": PatternGroup("外遊び用品", {
        "where-to-buy": Pattern(
            "購入場所",
            (
                "[商品名]はイオンで買える？実店舗で試乗できる場所を調査",
                "[商品名]の中古は危険？メルカリで買う時の注意点",
            ),
            "商品を実際に試せる店舗、中古購入のリスク、お得に買える場所を調査する記事",
        ),
        "age-guide": Pattern(
            "年齢別ガイド",
            (
                "[商品名]は何歳から何歳まで使える？年齢別の楽しみ方ガイド",
                "2歳には早い？[商品名]を始める最適なタイミング",
            ),
            "対象年齢、年齢別の遊び方、長く使うコツを解説する記事",
        ),
        "safety": Pattern(
            "安全対策",
            (
                "[商品名]の事故を防ぐ！安全に遊ぶための親の見守りポイント",
                "ヘルメットは必須？[商品名]の安全装備と選び方",
            ),
            "安全に使うための注意点、必要な安全装備、事故防止のポイントを解説する記事",
        ),
    }),
    "baby": PatternGroup("ベビー用品", {
        "where-to-buy": Pattern(
            "売ってる場所",
            (
                "[商品名]は西松屋と赤ちゃん本舗どっちが安い？店舗価格を比較",
                "[商品名]をお得に買うならどこ？セール時期と最安ショップまとめ",
            ),
            "商品の購入場所、店舗ごとの価格比較、お得に買えるタイミングを調査する記事",
        ),
        "regret": Pattern(
            "後悔・失敗談",
            (
                "買って後悔…[商品名]の失敗談と選び方のコツ",
                "[商品名]は本当に必要？なくても困らなかったという声も",
            ),
            "購入後の後悔ポイント、必要性の検討、代用品の可能性を正直にレビューする記事",
        ),
        "how-to-use": Pattern(
            "使い方・コツ",
            (
                "説明書より分かりやすい！[商品名]の正しい使い方と裏ワザ",
                "初心者でも失敗しない[商品名]のセットアップ完全ガイド",
            ),
            "商品の使い方、セットアップ方法、便利な使い方のコツを解説する記事",
        ),
    }),
    "safety": PatternGroup("安全グッズ", {
        "where-to-buy": Pattern(
            "売ってる場所",
            (
                "[商品名]は100均で代用できる？ダイソー・セリアの類似品を検証",
                "[商品名]はホームセンターにある？カインズ・コーナンの品揃えを調査",
            ),
            "商品の購入場所、100均での代用可能性、ホームセンターでの取り扱いを調査する記事",
        ),
        "necessity": Pattern(
            "必要性の検討",
            (
                "[商品名]は本当に必要？使わなかった先輩ママの声と実態",
                "賃貸でも使える？[商品名]の設置方法と原状回復の注意点",
            ),
            "商品の必要性、使わなかった人の意見、賃貸での設置可否を検討する記事",
        ),
    }),
}

# What each pattern key puts weight on
PATTERN_FOCUS: dict[str, str] = {
    "where-to-buy": "販売店舗、ネット通販、価格比較、在庫状況に焦点を当てる",
    "reviews": "口コミ分析、良い評判・悪い評判の両面、リアルな声を重視",
    "coupon": "クーポン情報、セール時期、ポイント還元、お得な買い方に焦点",
    "regret": "購入後の後悔ポイント、デメリット、向かない人を正直に解説",
    "lowest-price": "価格比較、1枚/1個あたり単価、定期便、まとめ買いを重視",
    "skin-trouble": "肌トラブル対策、敏感肌対応、アトピー児の使用感を重視",
    "size-check": "サイズ詳細、車・部屋への適合性、設置スペースを重視",
    "comparison": "競合商品との比較表、スペック比較、選び方のポイント",
    "effect": "知育効果、成長への影響、遊んだ結果の変化を重視",
    "age-guide": "対象年齢、年齢別の遊び方・使い方、卒業時期を重視",
    "safety": "安全対策、事故防止、必要な装備を重視",
    "when-to-start": "開始時期、月齢別の使い方、量の目安を重視",
    "quantity": "必要数量、消費ペース、まとめ買いの目安を重視",
    "cleaning": "お手入れ方法、洗い方、カビ・臭い対策を重視",
    "until-when": "使用期限、卒業のサイン、次のステップを重視",
    "hand-me-down": "お下がり可否、衛生面、使い回しのコツを重視",
    "used": "中古相場、メルカリ購入の注意点、売却のコツを重視",
    "gift": "ギフト適性、ラッピング、贈る際のマナーを重視",
    "authentic": "偽物の見分け方、正規品購入先、並行輸入リスクを重視",
    "repair": "修理方法、パーツ入手先、メンテナンス方法を重視",
    "how-to-use": "使い方のコツ、セットアップ、裏ワザを重視",
    "necessity": "必要性の検討、代用品、なくても良いケースを重視",
    "seasonal": "季節別の使い方、暑さ・寒さ対策を重視",
    "warranty": "保証内容、故障対応、返品条件を重視",
    "model-comparison": "新旧モデル比較、型落ちのメリットを重視",
    "rent-vs-buy": "レンタルvs購入、コスパ比較を重視",
    "alternative": "代用品、100均比較、本物の価値を重視",
    "storage": "収納方法、省スペース、片付けのコツを重視",
    "tips": "実用テクニック、アレンジ、裏ワザを重視",
}

# Pattern keys that make no sense for a product subcategory
EXCLUDED_BY_SUBCAT: dict[str, tuple[str, ...]] = {
    # Consumables: no repair, hand-me-down or used angles
    "diapers": ("repair", "hand-me-down", "used", "rent-vs-buy", "warranty", "model-comparison", "storage"),
    "wipes": ("repair", "hand-me-down", "used", "rent-vs-buy", "warranty", "model-comparison", "storage", "size-check"),
    "care": ("repair", "hand-me-down", "used", "rent-vs-buy", "warranty", "size-check"),
    # Food
    "formula": ("repair", "hand-me-down", "used", "storage", "size-check", "cleaning", "rent-vs-buy", "warranty"),
    "babyfood": ("repair", "hand-me-down", "used", "storage", "size-check", "cleaning", "rent-vs-buy", "warranty", "skin-trouble"),
    "feeding": ("hand-me-down", "used", "rent-vs-buy", "skin-trouble", "size-check"),
    # Carriers, strollers, car seats
    "carrier": ("skin-trouble", "when-to-start", "quantity"),
    "stroller": ("skin-trouble", "when-to-start", "quantity", "cleaning"),
    "carseat": ("skin-trouble", "when-to-start", "quantity", "cleaning"),
    # Bouncers, beds
    "bouncer": ("skin-trouble", "when-to-start", "quantity"),
    "swing": ("skin-trouble", "when-to-start", "quantity"),
    "bed": ("skin-trouble", "quantity"),
    "bedding": ("quantity", "repair"),
    "bath": ("quantity", "when-to-start", "repair"),
    # Safety
    "gate": ("skin-trouble", "when-to-start", "quantity", "seasonal"),
    "cushion": ("skin-trouble", "when-to-start", "rent-vs-buy", "warranty", "model-comparison"),
    # Toys
    "blocks": ("skin-trouble", "quantity", "seasonal", "when-to-start"),
    "learning": ("skin-trouble", "quantity", "seasonal"),
    "vehicle": ("skin-trouble", "quantity", "seasonal", "when-to-start"),
    "dollhouse": ("skin-trouble", "quantity", "seasonal", "when-to-start"),
    "doll": ("skin-trouble", "quantity", "seasonal"),
    # Outdoor
    "bike": ("skin-trouble", "quantity", "when-to-start", "cleaning"),
    "ride": ("skin-trouble", "quantity", "when-to-start"),
    "pool": ("skin-trouble", "quantity", "repair", "hand-me-down", "used", "rent-vs-buy"),
}

# Slug suffix -> pattern key. Longer suffixes first.
SLUG_SUFFIXES: tuple[tuple[str, str], ...] = (
    ("-model-comparison", "model-comparison"),
    ("-skin-trouble", "skin-trouble"),
    ("-where-to-buy", "where-to-buy"),
    ("-lowest-price", "lowest-price"),
    ("-when-to-start", "when-to-start"),
    ("-size-check", "size-check"),
    ("-how-to-use", "how-to-use"),
    ("-alternative", "alternative"),
    ("-necessity", "necessity"),
    ("-age-guide", "age-guide"),
    ("-warranty", "warranty"),
    ("-seasonal", "seasonal"),
    ("-quantity", "quantity"),
    ("-reviews", "reviews"),
    ("-storage", "storage"),
    ("-regret", "regret"),
    ("-effect", "effect"),
    ("-safety", "safety"),
    ("-coupon", "coupon"),
    ("-repair", "repair"),
    ("-tips", "tips"),
    ("-used", "used"),
)

DEFAULT_PATTERN = "reviews"


def get_patterns_for_category(category: str) -> dict[str, Pattern] | None:
    group = PATTERNS.get(category)
    return group.patterns if group else None


def get_pattern(category: str, pattern_key: str) -> Pattern | None:
    patterns = get_patterns_for_category(category)
    if patterns is None:
        return None
    return patterns.get(pattern_key)


def list_all_patterns() -> list[str]:
    """Human-readable listing of every category, pattern and title example."""
    lines = []
    for category, group in PATTERNS.items():
        lines.append(f"【{group.name}】({category})")
        for key, pattern in group.patterns.items():
            lines.append(f"  {key}: {pattern.name}")
            for i, title in enumerate(pattern.titles, start=1):
                lines.append(f"    例{i}: {title}")
    return lines


def generate_title(
    category: str,
    pattern_key: str,
    product_name: str,
    competitor: str | None = None,
    rng: random.Random | None = None,
) -> str | None:
    """Pick a random title template and fill in the product (and competitor) names."""
    pattern = get_pattern(category, pattern_key)
    if pattern is None:
        return None

    template = (rng or random).choice(pattern.titles)
    title = template.replace(PRODUCT_PLACEHOLDER, product_name)
    if competitor:
        for placeholder in COMPETITOR_PLACEHOLDERS:
            title = title.replace(placeholder, competitor)
    return title


def get_prompt(category: str, pattern_key: str) -> str | None:
    pattern = get_pattern(category, pattern_key)
    return pattern.prompt if pattern else None


def get_focus(pattern_key: str) -> str:
    return PATTERN_FOCUS.get(pattern_key, "")


def is_pattern_suitable_by_rule(subcat: str | None, pattern_key: str) -> bool:
    """False when the subcategory's exclusion list names the pattern."""
    return pattern_key not in EXCLUDED_BY_SUBCAT.get(subcat or "", ())


def pattern_from_slug(slug: str) -> str:
    # rent-vs-buy is a single-product angle, not a comparison page
    if slug.endswith("-rent-vs-buy"):
        return "rent-vs-buy"
    if "-vs-" in slug:
        return "comparison"
    for suffix, key in SLUG_SUFFIXES:
        if slug.endswith(suffix):
            return key
    return DEFAULT_PATTERN
