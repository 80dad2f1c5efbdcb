import pandas as pd

SCORE_COLUMNS = ["profile_distance", "geo_distance"]


def finalize_rank_output(D_rank: pd.DataFrame, sort_by: list, num_to_return: int):
    """
    Order scored candidates and keep the best `num_to_return` names.

    `D_rank` holds one row per eligible candidate with its `name`, its position in the store
    (`order`) and whichever score columns the query produced. Rows are sorted on `sort_by`
    (lowest first, earlier columns dominate) with `order` as the final key, so remaining ties
    keep store order. With nothing to sort by, store order is kept.
    """
    if D_rank.empty:
        return []

    unknown = [col for col in sort_by if col not in SCORE_COLUMNS]
    if unknown:
        raise ValueError(f"Cannot rank on {unknown}")

    df_copy = D_rank.sort_values(by=sort_by + ["order"], kind="mergesort")
    df_copy["rank"] = range(1, len(df_copy) + 1)

    return df_copy.loc[df_copy["rank"] <= num_to_return, "name"].tolist()
